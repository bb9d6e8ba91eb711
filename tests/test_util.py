import pytest

from pixiu.util import (
    ensure_directory_exists,
    is_directory_exists,
    is_file_exists,
    parse_int64,
)


def test_parse_empty_is_zero():
    assert parse_int64("") == 0


@pytest.mark.parametrize("value", [42, -42, 0])
def test_parse_round_trip(value):
    assert parse_int64(str(value)) == value


def test_parse_plus_sign():
    assert parse_int64("+7") == 7


def test_parse_int64_bounds():
    assert parse_int64(str(2**63 - 1)) == 2**63 - 1
    assert parse_int64(str(-(2**63))) == -(2**63)


@pytest.mark.parametrize("text", [str(2**63), str(-(2**63) - 1)])
def test_parse_out_of_range(text):
    with pytest.raises(ValueError):
        parse_int64(text)


@pytest.mark.parametrize("text", ["abc", " 1", "1_000", "1.5", "0x10", "-"])
def test_parse_invalid_syntax(text):
    with pytest.raises(ValueError):
        parse_int64(text)


def test_directory_and_file_checks(tmp_path):
    file_path = tmp_path / "f.txt"
    file_path.write_text("x")
    assert is_directory_exists(tmp_path) is True
    assert is_directory_exists(file_path) is False
    assert is_file_exists(file_path) is True
    assert is_file_exists(tmp_path) is False


def test_missing_path_checks(tmp_path):
    missing = tmp_path / "nope"
    assert is_directory_exists(missing) is False
    assert is_file_exists(missing) is False


def test_ensure_directory_creates_nested(tmp_path):
    target = tmp_path / "a" / "b" / "c"
    ensure_directory_exists(target)
    assert is_directory_exists(target) is True
    ensure_directory_exists(target)
    assert is_directory_exists(target) is True


def test_ensure_directory_over_file_fails(tmp_path):
    file_path = tmp_path / "f.txt"
    file_path.write_text("x")
    with pytest.raises(OSError):
        ensure_directory_exists(file_path)