from patch_js_locales import (
    find_patch_target,
    format_locale_block,
    is_complex_string,
    mask_js_literals,
    merge_constants,
    patch_locale_source,
    quote_js_value,
    unusable_keys,
    update_constants_file,
    update_locale_file,
)

TABLE = {
    "Hello World!": "Hello",
    "Only here": "x",
    "Items %1$s": "You have %1$s items",
}
COMMON = ["Hello World!", "Items %1$s"]
BLOCK = (
    "    common: {\n"
    '        hello_world: "Hello",\n'
    '        items_1s: "You have {0} items"\n'
    "    }"
)


def patch(content: str) -> str:
    return patch_locale_source(content, COMMON, TABLE, 0, "common")


def test_format_locale_block_follows_table_order():
    assert format_locale_block(TABLE, COMMON, 0, "common") == BLOCK
    reordered = format_locale_block(TABLE, list(reversed(COMMON)), 0, "common")
    assert reordered == BLOCK


def test_format_locale_block_truncates_keys():
    block = format_locale_block({"Hello World!": "Hi"}, ["Hello World!"], 5, "en")
    assert block == '    en: {\n        hello: "Hi"\n    }'


def test_complex_strings_use_backticks():
    assert is_complex_string("line\nbreak")
    assert is_complex_string("it's")
    assert is_complex_string("<b>bold</b>")
    assert is_complex_string("C:\\path")
    assert is_complex_string("caf\\u00e9")
    assert not is_complex_string("plain text")
    assert quote_js_value("it's `x` ${y}") == "`it's \\`x\\` \\${y}`"
    assert quote_js_value("line\nbreak") == "`line\nbreak`"


def test_plain_strings_use_double_quotes():
    assert quote_js_value("plain") == '"plain"'
    assert quote_js_value('say "hi"') == '"say \\"hi\\""'


def test_patch_module_exports():
    content = "module.exports = {\n  foo: 1\n};"
    expected = "module.exports = {\n  foo: 1,\n" + BLOCK + ",\n};"
    assert patch(content) == expected


def test_patch_export_default_with_inner_object():
    content = "export default {\n  x: {\n  }\n};"
    expected = "export default {\n  x: {\n  },\n" + BLOCK + ",\n};"
    assert patch(content) == expected


def test_patch_nested_closure_inserts_before_it():
    content = 'module.exports = {\n  en: {\n    foo: "Foo"\n  }};'
    target = find_patch_target(content)
    assert target is not None
    assert target.nested_closure == content.rindex("}};")
    expected = 'module.exports = {\n  en: {\n    foo: "Foo"\n  ' + BLOCK + ",\n}};"
    assert patch(content) == expected


def test_patch_ignores_distant_nested_closure():
    content = 'const nested = {a: {}};\nexport default {\n  foo: "Foo"\n};'
    target = find_patch_target(content)
    assert target is not None
    assert target.nested_closure is None
    expected = (
        'const nested = {a: {}};\nexport default {\n  foo: "Foo",\n' + BLOCK + ",\n};"
    )
    assert patch(content) == expected


def test_patch_keeps_existing_trailing_comma():
    content = "module.exports = {\n  foo: 1,\n};"
    assert patch(content) == "module.exports = {\n  foo: 1,\n" + BLOCK + ",\n};"


def test_patch_empty_object():
    content = "export default {\n};"
    assert patch(content) == "export default {\n" + BLOCK + ",\n};"


def test_patch_without_braces_appends_block():
    assert patch("") == "\n\n" + BLOCK + "\n"
    assert patch("// todo") == "// todo\n\n" + BLOCK + "\n"


def test_patch_ignores_braces_in_strings_and_comments():
    content = 'export default {\n  foo: "}"\n};\n// }\n'
    expected = 'export default {\n  foo: "}",\n' + BLOCK + ",\n};\n// }\n"
    assert patch(content) == expected


def test_patch_puts_comma_before_trailing_comment():
    content = "export default {\n  foo: 1 // first\n};"
    expected = "export default {\n  foo: 1, // first\n" + BLOCK + ",\n};"
    assert patch(content) == expected


def test_mask_js_literals_keeps_offsets():
    text = 'a = "{x}"; // }\n/* { */ b'
    masked = mask_js_literals(text)
    assert len(masked) == len(text)
    assert masked == 'a = "   ";     \n        b'
    assert mask_js_literals('x = "a\\"}"') == 'x = "    "'
    assert mask_js_literals("t = `a\n}`") == "t = ` \n `"


def test_merge_constants_into_empty_content():
    result = merge_constants("", COMMON, 0, "common")
    assert result == (
        "{\n"
        '    HELLO_WORLD: "common.hello_world",\n'
        '    ITEMS_1S: "common.items_1s"\n'
        "}\n"
    )


def test_merge_constants_into_existing_module():
    content = 'export default {\n    FOO: "common.foo"\n};\n'
    assert merge_constants(content, COMMON, 0, "common") == (
        "export default {\n"
        '    FOO: "common.foo",\n'
        '    HELLO_WORLD: "common.hello_world",\n'
        '    ITEMS_1S: "common.items_1s",\n'
        "};\n"
    )


def test_merge_constants_truncates_keys():
    assert merge_constants("", ["Hello World!"], 5, "common") == (
        '{\n    HELLO: "common.hello"\n}\n'
    )


def test_merge_constants_twice_duplicates_entries():
    once = merge_constants("", COMMON, 0, "common")
    twice = merge_constants(once, COMMON, 0, "common")
    assert twice.count("HELLO_WORLD:") == 2
    assert twice.count("ITEMS_1S:") == 2


def test_merge_constants_without_keys_is_a_no_op():
    assert merge_constants("export default {};", [], 0, "common") == "export default {};"


def test_update_locale_file(tmp_path):
    path = tmp_path / "en.js"
    path.write_text("module.exports = {\n  foo: 1\n};", encoding="utf-8")

    changed, message = update_locale_file(
        path, COMMON, TABLE, max_key_length=0, block_name="common", dry_run=False
    )

    assert changed
    assert message == "updated"
    assert path.read_text(encoding="utf-8") == (
        "module.exports = {\n  foo: 1,\n" + BLOCK + ",\n};"
    )


def test_update_locale_file_dry_run_does_not_write(tmp_path):
    path = tmp_path / "en.js"
    original = "module.exports = {\n  foo: 1\n};"
    path.write_text(original, encoding="utf-8")

    changed, _ = update_locale_file(
        path, COMMON, TABLE, max_key_length=0, block_name="common", dry_run=True
    )

    assert changed
    assert path.read_text(encoding="utf-8") == original


def test_update_locale_file_missing(tmp_path):
    changed, message = update_locale_file(
        tmp_path / "xx.js", COMMON, TABLE, max_key_length=0, block_name="common", dry_run=False
    )
    assert not changed
    assert message.startswith("skip: read error")


def test_update_constants_file_creates_missing_file(tmp_path):
    path = tmp_path / "constants.js"

    changed, message = update_constants_file(
        path, COMMON, max_key_length=0, block_name="common", dry_run=False
    )

    assert changed
    assert message == "created"
    assert 'HELLO_WORLD: "common.hello_world"' in path.read_text(encoding="utf-8")


def test_update_constants_file_dry_run_creates_nothing(tmp_path):
    path = tmp_path / "constants.js"
    changed, message = update_constants_file(
        path, COMMON, max_key_length=0, block_name="common", dry_run=True
    )
    assert changed
    assert message == "created"
    assert not path.exists()


def test_keys_without_usable_characters_are_skipped():
    table = {"404": "Not found", "Hello World!": "Hello"}
    keys = ["404", "Hello World!"]

    result = patch_locale_source("module.exports = {\n  foo: 1\n};", keys, table, 0, "common")

    assert result == (
        "module.exports = {\n  foo: 1,\n"
        '    common: {\n        hello_world: "Hello"\n    },\n};'
    )
    assert unusable_keys(keys, 0) == ["404"]
    assert merge_constants("", ["404"], 0, "common") == ""
    assert merge_constants("", keys, 0, "common") == (
        '{\n    HELLO_WORLD: "common.hello_world"\n}\n'
    )


def test_patch_with_quote_in_regex_literal():
    content = 'const re = /"/;\nexport default {\n  a: 1\n};'
    result = patch_locale_source(content, ["b"], {"b": "B"}, 0, "common")
    assert result == (
        'const re = /"/;\nexport default {\n  a: 1,\n'
        '    common: {\n        b: "B"\n    },\n};'
    )


def test_mask_js_literals_unterminated_falls_back_to_text():
    assert mask_js_literals("a = `{") == "a = `{"
    assert mask_js_literals("a = 1 /* }") == "a = 1 /* }"
    assert mask_js_literals("s = '{\n}") == "s = ' \n}"


def test_backslashes_survive_backtick_quoting():
    assert quote_js_value("C:\\path") == "`C:\\\\path`"
    assert quote_js_value("caf\\u00e9") == "`caf\\u00e9`"
    assert quote_js_value("\\u{1F600} \\x") == "`\\u{1F600} \\\\x`"


def test_line_terminators_are_complex():
    assert is_complex_string("a\rb")
    assert is_complex_string("a\u2028b")
    assert is_complex_string("a\u2029b")
    assert quote_js_value("a\rb") == "`a\rb`"
