import pytest

from steambuddy.vdf import Node, RegistryFileParser, VdfParseError, format_nodes

SAMPLE = b"""
"Registry"
{
    "HKLM"
    {
        "Software"
        {
            "Valve"
            {
                "Steam"
                {
                    "SteamPID"      "4242"
                    "SteamExe"      "/usr/bin/steam"
                }
            }
        }
    }
}
"""


def parse(data):
    parser = RegistryFileParser()
    parser.parse_bytes(data)
    return parser.root


def test_parse_nested_structure():
    root = parse(SAMPLE)
    assert len(root) == 1
    registry = root[0]
    assert registry.key == "Registry"
    steam = registry.value[0].value[0].value[0].value[0]
    assert steam.key == "Steam"
    assert steam.value == [Node("SteamPID", 4242), Node("SteamExe", "/usr/bin/steam")]


def test_unquoted_tokens_and_numbers():
    root = parse(b"key -5 other value group { inner 1 }")
    assert root == [
        Node("key", -5),
        Node("other", "value"),
        Node("group", [Node("inner", 1)]),
    ]


def test_number_outside_int32_stays_text():
    root = parse(b'"big" "2147483648" "hex" "0x10"')
    assert root == [Node("big", "2147483648"), Node("hex", "0x10")]


def test_empty_quoted_value():
    assert parse(b'"name" ""') == [Node("name", "")]


def test_escaped_quote_and_backslash():
    root = parse(b'"path" "C:\\\\games\\"x\\""')
    assert root == [Node("path", 'C:\\games"x"')]


def test_invalid_escape_raises():
    with pytest.raises(VdfParseError):
        parse(b'"a" "\\q"')


def test_group_without_key_raises():
    with pytest.raises(VdfParseError):
        parse(b"{ }")


def test_group_end_while_expecting_value_raises():
    with pytest.raises(VdfParseError):
        parse(b'"a" { "b" }')


def test_partial_result_kept_after_error():
    parser = RegistryFileParser()
    with pytest.raises(VdfParseError):
        parser.parse_bytes(b'"first" "1" "second" }')
    assert parser.root[0] == Node("first", 1)


def test_parse_file(tmp_path):
    path = tmp_path / "registry.vdf"
    path.write_bytes(SAMPLE)
    parser = RegistryFileParser()
    parser.parse(path)
    assert parser.root == parse(SAMPLE)


def test_parse_missing_file_keeps_previous_root(tmp_path):
    parser = RegistryFileParser()
    parser.parse_bytes(b'"k" "v"')
    with pytest.raises(FileNotFoundError):
        parser.parse(tmp_path / "missing.vdf")
    assert parser.root == [Node("k", "v")]


def test_format_nodes_layout():
    nodes = [Node("group", [Node("num", 3), Node("text", "abc")])]
    assert format_nodes(nodes) == '"group" {\n  "num" 3\n  "text" "abc"\n}\n'


def test_format_round_trip():
    root = parse(SAMPLE)
    assert parse(format_nodes(root).encode()) == root