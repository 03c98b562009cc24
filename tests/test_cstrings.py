import pytest

from milterkit.cstrings import decode_cstrings, read_cstring


def test_decode_empty_gives_empty_list():
    assert decode_cstrings(b"") == []


def test_decode_splits_on_nul():
    assert decode_cstrings(b"j\x00mail.example.com\x00") == ["j", "mail.example.com"]


def test_decode_trims_outer_nuls():
    assert decode_cstrings(b"\x00\x00a\x00b\x00\x00") == ["a", "b"]


def test_decode_keeps_inner_empty_fields():
    assert decode_cstrings(b"a\x00\x00b") == ["a", "", "b"]


def test_decode_only_nul():
    assert decode_cstrings(b"\x00") == [""]


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"host\x00rest", "host"),
        (b"no-terminator", "no-terminator"),
        (b"", ""),
        (b"\x00tail", ""),
    ],
)
def test_read_cstring(data, expected):
    assert read_cstring(data) == expected


def test_unicode_round_trip():
    words = ["grüße", "例え"]
    data = b"\x00".join(w.encode("utf-8") for w in words) + b"\x00"
    assert decode_cstrings(data) == words
    assert read_cstring(data) == words[0]