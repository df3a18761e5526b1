#!/usr/bin/env python3
"""Compare locale JSON files and push their common keys into a JS project.

Looks for `<code>.json` files (en, hi, kn, ta, te, mr, bn by default) in the
locale directory, then:
  - lists keys shared by every locale (-c),
  - lists keys found in only one locale (-u),
  - prints the JS object block each locale would receive (-p),
  - merges the common keys into `<project>/<code>.js` and records lookup
    constants in `<project>/constants.js` (--push).

The project path is remembered in ~/.localiser.properties.

Typical usage:
  python localiser.py -c -u
  python localiser.py --push --block-name common --dry-run
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Callable

from locale_keys import (
    DEFAULT_LOCALE_NAMES,
    LocaleSet,
    NoLocalesError,
    common_keys,
    load_locale_names,
    load_locale_set,
    locale_full_name,
    sanitize_key,
    unique_keys,
)
from patch_js_locales import (
    format_locale_block,
    unusable_keys,
    update_constants_file,
    update_locale_file,
)

__version__ = "1.0.0"

CONFIG_FILE_NAME = ".localiser.properties"
PROJECT_PATH_KEY = "projectPath"
CONSTANTS_FILE_NAME = "constants.js"
DEFAULT_BLOCK_NAME = "common"


class ConfigStore:
    """Flat `key=value` properties file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.values: dict[str, str] = {}

    @classmethod
    def default(cls) -> ConfigStore:
        return cls(Path.home() / CONFIG_FILE_NAME)

    def load(self) -> ConfigStore:
        self.values = {}
        if not self.path.is_file():
            return self
        try:
            text = self.path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as exc:
            print(f"[warn] cannot read config {self.path}: {exc}")
            return self
        for line in text.splitlines():
            stripped = line.strip()
            if not stripped or stripped[0] in "#!":
                continue
            if (idx := stripped.find("=")) == -1:
                continue
            self.values[stripped[:idx].strip()] = stripped[idx + 1 :].strip()
        return self

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.values.get(key, default)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            "".join(f"{key}={value}\n" for key, value in self.values.items()),
            encoding="utf-8",
        )


class Prompter:
    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self.input_func = input_func
        self.output_func = output_func

    def ask(self, question: str, default: str | None = None) -> str | None:
        self.output_func(f"{question} [{default}]" if default else question)
        try:
            answer = self.input_func("> ").strip()
        except EOFError:
            return default
        return answer or default


def print_common_keys(locales: LocaleSet, max_key_length: int) -> None:
    print("Common keys across all locales:")
    keys = common_keys(locales)
    print(f"Found {len(keys)} common keys")
    for key in keys:
        print(f"  {sanitize_key(key, max_key_length)}")


def print_unique_keys(
    locales: LocaleSet, max_key_length: int, names: dict[str, str]
) -> None:
    print("\nUnique keys in each locale:")
    for locale in locales:
        keys = unique_keys(locales, locale)
        if not keys:
            continue
        print(f" {locale_full_name(locale, names)} | {len(keys)} :")
        for key in keys:
            print(f"  {sanitize_key(key, max_key_length)}")


def warn_unusable_keys(keys: list[str], max_key_length: int) -> None:
    for key in unusable_keys(keys, max_key_length):
        print(f"[warn] key '{key}' has no usable characters; skipped")


def print_locale_blocks(locales: LocaleSet, max_key_length: int) -> None:
    keys = common_keys(locales)
    print(f"\nJS objects for {len(keys)} common keys:")
    warn_unusable_keys(keys, max_key_length)
    for locale, table in locales.items():
        print(format_locale_block(table, keys, max_key_length, locale))
        print()


def resolve_project_dir(
    project_path: str | None, config: ConfigStore, prompter: Prompter
) -> Path | None:
    if not project_path:
        project_path = prompter.ask(
            "Enter the path to your project's locales folder:",
            config.get(PROJECT_PATH_KEY),
        )
    if not project_path:
        print("[skip] no project path given")
        return None

    project_dir = Path(project_path).expanduser()
    if not project_dir.is_dir():
        print(f"[warn] invalid directory path: {project_dir}. Please ensure the directory exists.")
        return None
    return project_dir


def update_project(
    locales: LocaleSet,
    *,
    max_key_length: int,
    config: ConfigStore,
    prompter: Prompter,
    project_path: str | None = None,
    block_name: str | None = None,
    dry_run: bool = False,
) -> int:
    """Push common keys into every `<locale>.js` and `constants.js`.

    Returns the number of locale files changed.
    """
    config.load()
    project_dir = resolve_project_dir(project_path, config, prompter)
    if project_dir is None:
        return 0

    keys = common_keys(locales)
    if not keys:
        print("[skip] no common keys to push")
        return 0
    warn_unusable_keys(keys, max_key_length)
    if len(unusable_keys(keys, max_key_length)) == len(keys):
        print("[skip] no common keys with usable names to push")
        return 0

    if not block_name:
        block_name = prompter.ask(
            "Enter the object name for the new strings:", DEFAULT_BLOCK_NAME
        ) or DEFAULT_BLOCK_NAME

    if not dry_run:
        config.set(PROJECT_PATH_KEY, str(project_dir))
        config.save()

    action = "would update" if dry_run else "updated"
    changed = 0
    for locale, table in locales.items():
        locale_file = project_dir / f"{locale}.js"
        if not locale_file.is_file():
            print(f"[warn] {locale}.js does not exist in {project_dir}. Skipping.")
            continue
        is_changed, message = update_locale_file(
            locale_file,
            keys,
            table,
            max_key_length=max_key_length,
            block_name=block_name,
            dry_run=dry_run,
        )
        if is_changed:
            changed += 1
            print(f"[{action}] {locale_file}")
        else:
            print(f"[{message}] {locale_file}")

    constants_file = project_dir / CONSTANTS_FILE_NAME
    is_changed, message = update_constants_file(
        constants_file,
        keys,
        max_key_length=max_key_length,
        block_name=block_name,
        dry_run=dry_run,
    )
    if is_changed and dry_run:
        message = "would create" if message == "created" else "would update"
    print(f"[{message}] {constants_file}")

    print(
        f"{len(keys)} common strings {'would be pushed' if dry_run else 'pushed'} "
        f"to {changed} locale file(s)."
    )
    return changed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localiser",
        description="Compare locale JSON files and merge their common keys into JS locale modules.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-c",
        "--list-common-keys",
        action="store_true",
        help="List common keys across all locales.",
    )
    parser.add_argument(
        "-u",
        "--list-unique-keys",
        action="store_true",
        help="List unique keys in each locale file.",
    )
    parser.add_argument(
        "-p",
        "--print-locales",
        action="store_true",
        help="Print JS objects for common keys.",
    )
    parser.add_argument(
        "-l",
        "--key-length",
        type=int,
        default=0,
        help="Maximum length for keys (0 for no limit).",
    )
    parser.add_argument(
        "--push",
        "--update-project",
        dest="update_project",
        action="store_true",
        help="Update the project's locale files.",
    )
    parser.add_argument(
        "--project-path",
        default="",
        help="Project locales folder (default: prompt, remembering the last one).",
    )
    parser.add_argument(
        "--block-name",
        default="",
        help=f"Object name for the inserted strings (default: prompt, then '{DEFAULT_BLOCK_NAME}').",
    )
    parser.add_argument(
        "--locale-dir",
        type=Path,
        default=Path("."),
        help="Directory holding the locale JSON files (default: current directory).",
    )
    parser.add_argument(
        "--locale-names",
        type=Path,
        default=None,
        help="JSON object of locale code -> display name, merged over the built-in table.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Config file (default: ~/{CONFIG_FILE_NAME}).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report files that would be updated.",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    prompter: Prompter | None = None,
    config: ConfigStore | None = None,
) -> int:
    args = build_parser().parse_args(argv)

    if args.key_length < 0:
        print("[warn] --key-length must be >= 0; using no limit")
        args.key_length = 0

    names = dict(DEFAULT_LOCALE_NAMES)
    if args.locale_names is not None:
        try:
            names = load_locale_names(args.locale_names)
        except (OSError, ValueError) as exc:
            print(f"[warn] cannot load locale names from {args.locale_names}: {exc}")
            return 0

    locale_dir = args.locale_dir.resolve()
    print(f"Checking Directory {locale_dir}")
    locales, warnings = load_locale_set(locale_dir, names)
    for warning in warnings:
        print(f"[warn] {warning}")

    if not locales:
        print("No locale files found in the current directory.")
        return 0

    try:
        if args.list_common_keys:
            print_common_keys(locales, args.key_length)
        if args.list_unique_keys:
            print_unique_keys(locales, args.key_length, names)
        if args.print_locales:
            print_locale_blocks(locales, args.key_length)
        if args.update_project:
            if config is None:
                config = ConfigStore(args.config) if args.config else ConfigStore.default()
            update_project(
                locales,
                max_key_length=args.key_length,
                config=config,
                prompter=prompter or Prompter(),
                project_path=args.project_path or None,
                block_name=args.block_name or None,
                dry_run=args.dry_run,
            )
    except NoLocalesError as exc:
        print(f"[skip] {exc}")
    except OSError as exc:
        print(f"[skip] io failed: {exc}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
