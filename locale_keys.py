"""Locale key helpers: sanitization, placeholder rewriting and key-set reconciliation.

Locale tables are flat JSON objects loaded from `<code>.json` files. Only
files whose base name is a known locale code are loaded.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

POSITIONAL_PLACEHOLDER_RE = re.compile(r"%([0-9]+)\$([A-Za-z])")
SIMPLE_PLACEHOLDER_RE = re.compile(r"%([A-Za-z])")

DEFAULT_LOCALE_NAMES: dict[str, str] = {
    "en": "English",
    "hi": "Hindi",
    "kn": "Kannada",
    "ta": "Tamil",
    "te": "Telugu",
    "mr": "Marathi",
    "bn": "Bengali",
}

LocaleTable = dict[str, str]
LocaleSet = dict[str, LocaleTable]


class NoLocalesError(ValueError):
    pass


def _keep_char(ch: str) -> bool:
    return ch.isalpha() or ch.isdigit()


def sanitize_key(key: str, max_length: int = 0) -> str:
    """Turn a raw translation key into a lowercase identifier.

    Letters and digits are kept (letters lower-cased), spaces become
    underscores, underscores stay, everything else is dropped. Leading
    digits and underscores are trimmed so the result starts with a letter.
    """
    out: list[str] = []
    for ch in key:
        if ch == " " or ch == "_":
            out.append("_")
        elif _keep_char(ch):
            # lower() may expand a character; drop anything that is no longer alnum
            out.extend(lc for lc in ch.lower() if _keep_char(lc))

    start = 0
    while start < len(out) and not out[start].isalpha():
        start += 1
    result = "".join(out[start:])

    if max_length > 0 and len(result) > max_length:
        result = result[:max_length]
    return result


def translate_placeholders(value: str) -> str:
    """Rewrite `%1$s` to `{0}` and plain `%s` to `{0}`.

    A bare `$x` is not a placeholder and is left as is.
    """
    if "%" not in value and "$" not in value:
        return value

    def positional(match: re.Match[str]) -> str:
        return f"{{{int(match.group(1)) - 1}}}"

    translated = POSITIONAL_PLACEHOLDER_RE.sub(positional, value)
    return SIMPLE_PLACEHOLDER_RE.sub("{0}", translated)


def common_keys(locales: LocaleSet) -> list[str]:
    if not locales:
        raise NoLocalesError("No locales loaded")
    tables = list(locales.values())
    shared = set(tables[0])
    for table in tables[1:]:
        shared.intersection_update(table)
    return [key for key in tables[0] if key in shared]


def unique_keys(locales: LocaleSet, locale: str) -> list[str]:
    table = locales[locale]
    others: set[str] = set()
    for code, other in locales.items():
        if code != locale:
            others.update(other)
    return [key for key in table if key not in others]


def locale_full_name(code: str, names: dict[str, str] | None = None) -> str:
    return (names if names is not None else DEFAULT_LOCALE_NAMES).get(code, "Unknown")


def load_locale_names(path: Path) -> dict[str, str]:
    """Merge a JSON object of `code -> name` over the default table."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Locale names file must be a JSON object: {path}")
    names = dict(DEFAULT_LOCALE_NAMES)
    for code, name in raw.items():
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Locale name for '{code}' must be a non-empty string")
        names[str(code)] = name.strip()
    return names


def leaf_to_text(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def read_locale_table(path: Path) -> LocaleTable:
    raw = path.read_text(encoding="utf-8")
    if raw.startswith("\ufeff"):
        raw = raw.lstrip("\ufeff")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"Locale file must be a JSON object: {path.name}")
    return {str(key): leaf_to_text(value) for key, value in data.items()}


def load_locale_set(
    directory: Path, allowed: set[str] | dict[str, str]
) -> tuple[LocaleSet, list[str]]:
    """Load every allow-listed `<code>.json` in `directory`.

    Files that fail to parse are skipped and reported in the returned
    warning list instead of aborting the whole load.
    """
    locales: LocaleSet = {}
    warnings: list[str] = []
    for path in sorted(directory.glob("*.json")):
        if not path.is_file() or path.stem not in allowed:
            continue
        try:
            locales[path.stem] = read_locale_table(path)
        except json.JSONDecodeError as exc:
            warnings.append(f"invalid JSON in {path.name}: {exc.msg} (line {exc.lineno})")
        except (UnicodeDecodeError, ValueError, OSError) as exc:
            warnings.append(f"cannot load {path.name}: {exc}")
    return locales, warnings
