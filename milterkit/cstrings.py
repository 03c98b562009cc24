"""Helpers for NUL-terminated strings as they appear on the milter wire."""

from __future__ import annotations

NUL = "\x00"
_NUL_BYTE = b"\x00"


def _decode(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


def decode_cstrings(data: bytes) -> list[str]:
    """Split a run of NUL-separated strings into a list.

    Leading and trailing NULs are ignored; empty input gives an empty list.
    """
    if not data:
        return []
    return _decode(bytes(data)).strip(NUL).split(NUL)


def read_cstring(data: bytes) -> str:
    """Return the string up to the first NUL, or all of ``data`` if there is none."""
    head, _, _ = bytes(data).partition(_NUL_BYTE)
    return _decode(head)