import pytest

from zhaddons.stroke import Stroke

LINES = [
    "# comment line",
    "1 一",
    "12 十",
    "123 千",
    "  21 八  ",
    "125  bad",
    "12a 错",
    "1 ab",
    "",
]


@pytest.fixture
def stroke():
    s = Stroke()
    s.load_lines(LINES)
    return s


def test_reverse_lookup(stroke):
    assert stroke.reverse_lookup("十") == "12"
    assert stroke.reverse_lookup("八") == "21"
    assert stroke.reverse_lookup("错") == ""
    assert stroke.reverse_lookup("bad") == ""


def test_unique_prefix_with_zero_limit(stroke):
    assert stroke.lookup("123", 0) == [("千", "123")]


def test_ambiguous_prefix_with_zero_limit(stroke):
    assert stroke.lookup("12", 0) == []


def test_exact_match_first(stroke):
    results = stroke.lookup("1", -1)
    assert results[0] == ("一", "1")


def test_results_are_dictionary_entries(stroke):
    results = stroke.lookup("12", -1)
    assert results
    for hanzi, sequence in results:
        assert stroke.reverse_lookup(hanzi) == sequence


def test_results_unique_by_strokes(stroke):
    results = stroke.lookup("1", -1)
    sequences = [sequence for _, sequence in results]
    assert len(sequences) == len(set(sequences))


def test_limit_respected(stroke):
    assert len(stroke.lookup("1", 2)) == 2
    assert len(stroke.lookup("1", 1)) == 1


def test_transposition_found(stroke):
    results = stroke.lookup("21", -1)
    assert ("十", "12") in results
    assert results[0] == ("八", "21")


def test_substitution_found(stroke):
    assert ("一", "1") in stroke.lookup("3", -1)


def test_too_many_errors(stroke):
    assert stroke.lookup("4444", -1) == []


def test_pretty_string(stroke):
    assert stroke.pretty_string("12345") == "一丨丿㇏𠃍"
    assert stroke.pretty_string("16") == ""
    assert stroke.pretty_string("") == ""


def test_load_from_file(tmp_path):
    path = tmp_path / "py_stroke.mb"
    path.write_bytes("12 十\n".encode("utf-8") + b"\xff\xfe 1\n" + "1 一\n".encode("utf-8"))
    s = Stroke(path)
    assert s.load() is True
    assert s.reverse_lookup("十") == "12"
    assert s.reverse_lookup("一") == "1"
    assert s.lookup("12", 0) == [("十", "12")]


def test_load_missing(tmp_path):
    assert Stroke(tmp_path / "missing.mb").load() is False
    assert Stroke(None).load() is False