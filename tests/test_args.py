import pytest

from discreet.args import (
    Arg,
    ArgList,
    ArgParseError,
    get_ident,
    ident_list,
    parse_int_lit,
    parse_stencil,
)

MAIN_ARGS = """
    equation: u_y + c * u_x = 0,
    stencil: [(-1, 0), (0, 0), (0, -1)],
    constants: [c],
    functions: [],
"""


def test_parse_example_arguments():
    args = ArgList.parse(MAIN_ARGS)
    assert [a.name for a in args.items] == ["equation", "stencil", "constants", "functions"]
    assert args.find_arg("equation") == "u_y + c * u_x = 0"
    assert args.find_arg("stencil") == "[(-1, 0), (0, 0), (0, -1)]"
    assert args.find_arg("functions") == "[]"


def test_missing_argument_is_none():
    assert ArgList.parse(MAIN_ARGS).find_arg("unknown") is None


def test_empty_text_has_no_arguments():
    assert ArgList.parse("").items == ()


def test_first_duplicate_wins():
    args = ArgList.parse("a: 1, a: 2")
    assert args.find_arg("a") == "1"


def test_bare_flag_followed_by_comma_is_true():
    args = ArgList.parse("verbose, level: 3")
    assert args.items[0] == Arg("verbose", "true")
    assert args.find_arg("level") == "3"


def test_value_may_be_a_path():
    assert ArgList.parse("kind: a::b").find_arg("kind") == "a::b"


@pytest.mark.parametrize(
    "text",
    ["verbose", ",", "a: 1,, b: 2", "1abc: 2", "a:", "a::b, c: 1", "a: [1, 2"],
)
def test_malformed_argument_lists(text):
    with pytest.raises(ArgParseError):
        ArgList.parse(text)


def test_parse_stencil_of_example():
    assert parse_stencil("[(-1, 0), (0, 0), (0, -1)]") == [(-1, 0), (0, 0), (0, -1)]


def test_parse_stencil_allows_trailing_commas():
    assert parse_stencil("[(0, 0), (1, 0),]") == [(0, 0), (1, 0)]
    assert parse_stencil("[]") == []


@pytest.mark.parametrize(
    "text", ["(1, 2)", "[1, 2]", "[(1)]", "[(1, 2, 3)]", "[(a, 0)]", "[(0, 0)] + [(1, 0)]"]
)
def test_bad_stencils(text):
    with pytest.raises(ArgParseError):
        parse_stencil(text)


def test_stencil_error_messages():
    with pytest.raises(ArgParseError, match="Expected tuple."):
        parse_stencil("[1, 2]")
    with pytest.raises(ArgParseError, match="array of offsets"):
        parse_stencil("(1, 2)")


@pytest.mark.parametrize(
    "text, expected",
    [("0", 0), ("7", 7), ("-3", -3), ("- 3", -3), ("1_000", 1000), ("5isize", 5)],
)
def test_parse_int_lit(text, expected):
    assert parse_int_lit(text) == expected


@pytest.mark.parametrize("text", ["x", "1.5", "--1", "+1", ""])
def test_parse_int_lit_rejects(text):
    with pytest.raises(ArgParseError, match="Expected integer"):
        parse_int_lit(text)


def test_ident_list():
    assert ident_list("[c]") == ["c"]
    assert ident_list("[nu, f_1]") == ["nu", "f_1"]
    assert ident_list("[]") == []


def test_ident_list_requires_array():
    with pytest.raises(ArgParseError, match="array of identifiers"):
        ident_list("c")


def test_get_ident_rejects_paths_and_literals():
    assert get_ident(" nu ") == "nu"
    with pytest.raises(ArgParseError, match="without a path"):
        get_ident("a::b")
    with pytest.raises(ArgParseError):
        get_ident("1")