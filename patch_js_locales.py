"""Merge common translations into hand-written JS locale modules.

The files are treated as text. The insertion point is the last closing
brace of the module (or a trailing `}};` nested closure right before it),
searched on a masked copy of the source where string bodies and comments
are blanked out, so braces inside literals never count as structure.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from locale_keys import LocaleTable, sanitize_key, translate_placeholders

NESTED_CLOSURE = "}};"
NESTED_CLOSURE_WINDOW = 5
COMPLEX_MARKERS = ("\n", "\r", "\u2028", "\u2029", "'", "\\", "<", "\\u")
LONE_BACKSLASH_RE = re.compile(r"\\(?!u[0-9A-Fa-f]{4}|u\{[0-9A-Fa-f]+\})")
BLOCK_INDENT = " " * 4
ENTRY_INDENT = " " * 8


@dataclass(frozen=True)
class PatchTarget:
    content: str
    last_brace: int
    nested_closure: int | None


def mask_js_literals(text: str) -> str:
    """Blank out comments and string literal bodies, keeping offsets.

    Quote characters stay in place; everything between them becomes a
    space, except line breaks which are preserved. A line break ends a
    single or double quoted literal. If the text ends inside a literal or
    block comment it is returned unmasked.
    """
    normal = 0
    line_comment = 1
    block_comment = 2
    quoted = 3

    state = normal
    quote = ""
    out: list[str] = []
    i = 0
    n = len(text)

    def blank(ch: str) -> str:
        return ch if ch in "\r\n" else " "

    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if state == normal:
            if ch == "/" and nxt == "/":
                out.append("  ")
                i += 2
                state = line_comment
                continue
            if ch == "/" and nxt == "*":
                out.append("  ")
                i += 2
                state = block_comment
                continue
            if ch in "'\"`":
                out.append(ch)
                quote = ch
                i += 1
                state = quoted
                continue
            out.append(ch)
            i += 1
            continue

        if state == line_comment:
            out.append(blank(ch))
            if ch in "\r\n":
                state = normal
            i += 1
            continue

        if state == block_comment:
            if ch == "*" and nxt == "/":
                out.append("  ")
                i += 2
                state = normal
            else:
                out.append(blank(ch))
                i += 1
            continue

        # inside a string literal
        if ch == "\\" and i + 1 < n:
            out.append(" ")
            out.append(blank(nxt))
            i += 2
            continue
        if ch == quote or (quote != "`" and ch in "\r\n"):
            out.append(ch)
            state = normal
        else:
            out.append(blank(ch))
        i += 1

    if state in (block_comment, quoted):
        return text
    return "".join(out)


def find_patch_target(content: str) -> PatchTarget | None:
    masked = mask_js_literals(content)
    last_brace = masked.rfind("}")
    if last_brace == -1:
        return None
    nested = masked.rfind(NESTED_CLOSURE)
    if nested == -1 or nested <= last_brace - NESTED_CLOSURE_WINDOW:
        return PatchTarget(content=content, last_brace=last_brace, nested_closure=None)
    return PatchTarget(content=content, last_brace=last_brace, nested_closure=nested)


def is_complex_string(value: str) -> bool:
    return any(marker in value for marker in COMPLEX_MARKERS)


def quote_js_value(value: str) -> str:
    if is_complex_string(value):
        escaped = LONE_BACKSLASH_RE.sub(r"\\\\", value)
        escaped = escaped.replace("`", "\\`").replace("${", "\\${")
        return f"`{escaped}`"
    escaped = value.replace('"', '\\"')
    return f'"{escaped}"'


def format_locale_block(
    table: LocaleTable,
    common: Iterable[str],
    max_key_length: int,
    block_name: str,
) -> str:
    shared = set(common)
    lines: list[str] = []
    for key, value in table.items():
        sanitized = sanitize_key(key, max_key_length)
        if key not in shared or not sanitized:
            continue
        lines.append(
            f"{ENTRY_INDENT}{sanitized}: {quote_js_value(translate_placeholders(value))}"
        )
    return f"{BLOCK_INDENT}{block_name}: {{\n" + ",\n".join(lines) + f"\n{BLOCK_INDENT}}}"


def unusable_keys(keys: Iterable[str], max_key_length: int) -> list[str]:
    """Keys that sanitize to nothing and are left out of generated code."""
    return [key for key in keys if not sanitize_key(key, max_key_length)]


def with_separator(content: str, end: int) -> str:
    """Return `content[:end]`, adding a comma after the last entry if missing.

    Nothing is added when the prefix already ends with `,\\n` or when the
    last code character is `,` or the opening `{` of an empty object.
    """
    before = content[:end]
    if before.endswith(",\n"):
        return before
    code = mask_js_literals(before).rstrip()
    if not code or code[-1] in ",{":
        return before
    pos = len(code)
    return before[:pos] + "," + before[pos:]


def patch_locale_source(
    content: str,
    common: Iterable[str],
    table: LocaleTable,
    max_key_length: int,
    block_name: str,
) -> str:
    block = format_locale_block(table, common, max_key_length, block_name)
    target = find_patch_target(content)
    if target is None:
        return f"{content}\n\n{block}\n"

    if target.nested_closure is not None:
        at = target.nested_closure
        return content[:at] + block + ",\n" + content[at:]

    before = with_separator(content, target.last_brace)
    return before + block + ",\n" + content[target.last_brace :]


def merge_constants(
    content: str,
    common: Iterable[str],
    max_key_length: int,
    block_name: str,
) -> str:
    """Add `UPPER_KEY: "block.key"` entries for each common key.

    Existing entries are not checked, so merging the same keys twice
    repeats them.
    """
    lines: list[str] = []
    for key in common:
        sanitized = sanitize_key(key, max_key_length)
        if not sanitized:
            continue
        lines.append(f'{BLOCK_INDENT}{sanitized.upper()}: "{block_name}.{sanitized}"')
    if not lines:
        return content
    body = ",\n".join(lines)

    target = find_patch_target(content)
    if target is None:
        return f"{content}{{\n{body}\n}}\n"

    before = with_separator(content, target.last_brace)
    return before + body + ",\n" + content[target.last_brace :]


def update_locale_file(
    path: Path,
    common: list[str],
    table: LocaleTable,
    *,
    max_key_length: int,
    block_name: str,
    dry_run: bool,
) -> tuple[bool, str]:
    try:
        original = path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return False, "skip: non-utf8"
    except OSError as exc:
        return False, f"skip: read error ({exc})"

    updated = patch_locale_source(original, common, table, max_key_length, block_name)
    if updated == original:
        return False, "skip: no change"
    if not dry_run:
        try:
            path.write_text(updated, encoding="utf-8")
        except OSError as exc:
            return False, f"skip: write error ({exc})"
    return True, "updated"


def update_constants_file(
    path: Path,
    common: list[str],
    *,
    max_key_length: int,
    block_name: str,
    dry_run: bool,
) -> tuple[bool, str]:
    created = False
    if not path.exists():
        if not dry_run:
            path.touch()
        created = True
    try:
        original = "" if created and dry_run else path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return False, "skip: non-utf8"
    except OSError as exc:
        return False, f"skip: read error ({exc})"

    updated = merge_constants(original, common, max_key_length, block_name)
    if not dry_run:
        try:
            path.write_text(updated, encoding="utf-8")
        except OSError as exc:
            return False, f"skip: write error ({exc})"
    return True, "created" if created else "updated"
