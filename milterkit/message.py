"""Packets, header collections, errors and responses of the milter protocol."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field

_RSP_ACCEPT = ord("a")
_RSP_CONTINUE = ord("c")
_RSP_DISCARD = ord("d")
_RSP_REJECT = ord("r")
_RSP_TEMPFAIL = ord("t")

_STOP_CODES = frozenset({_RSP_ACCEPT, _RSP_DISCARD, _RSP_REJECT, _RSP_TEMPFAIL})

_TOKEN_EXTRA = frozenset("!#$%&'*+-.^_`|~")


def _as_code(code: int | str | bytes) -> int:
    if isinstance(code, str):
        if len(code) != 1:
            raise ValueError(f"response code must be a single character, got {code!r}")
        code = ord(code)
    elif isinstance(code, (bytes, bytearray)):
        if len(code) != 1:
            raise ValueError(f"response code must be a single byte, got {code!r}")
        code = code[0]
    if not 0 <= code <= 0xFF:
        raise ValueError(f"response code out of byte range: {code}")
    return code


@dataclass(frozen=True)
class Message:
    """A single milter packet: a one-byte command or reply code and its payload."""

    code: int
    data: bytes = b""


def canonical_key(key: str) -> str:
    """Return the canonical MIME form of a header name, e.g. ``Content-Type``.

    Names holding characters that are not valid in a header field name are
    returned unchanged.
    """
    for ch in key:
        if not (ch.isascii() and (ch.isalnum() or ch in _TOKEN_EXTRA)):
            return key
    parts = []
    upper = True
    for ch in key:
        parts.append(ch.upper() if upper else ch.lower())
        upper = ch == "-"
    return "".join(parts)


class MimeHeader:
    """Case-insensitive multi-valued collection of message headers."""

    def __init__(self) -> None:
        self._fields: dict[str, list[str]] = {}

    def add(self, key: str, value: str) -> None:
        """Append ``value`` to the values held for ``key``."""
        self._fields.setdefault(canonical_key(key), []).append(value)

    def get(self, key: str) -> str:
        """Return the first value for ``key``, or an empty string."""
        values = self._fields.get(canonical_key(key))
        return values[0] if values else ""

    def values(self, key: str) -> list[str]:
        """Return all values for ``key`` in the order they were added."""
        return list(self._fields.get(canonical_key(key), ()))

    def items(self) -> Iterator[tuple[str, list[str]]]:
        for key, values in self._fields.items():
            yield key, list(values)

    def __getitem__(self, key: str) -> list[str]:
        return list(self._fields[canonical_key(key)])

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_key(key) in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MimeHeader):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"MimeHeader({self._fields!r})"


class CloseSession(Exception):
    """Raised to stop processing of the current milter session."""

    def __init__(self, message: str = "Stop current milter processing") -> None:
        super().__init__(message)


class MacroNoData(Exception):
    """Raised when a macro definition carries no data."""

    def __init__(self, message: str = "Macro definition with no data") -> None:
        super().__init__(message)


class Response(ABC):
    """What a callback returns to tell the MTA how to proceed."""

    @abstractmethod
    def response(self) -> Message:
        """Return the packet to send back to the MTA."""

    @abstractmethod
    def continues(self) -> bool:
        """Return True if the session should keep processing commands."""


@dataclass(frozen=True)
class SimpleResponse(Response):
    """A response consisting of a code alone."""

    code: int

    def response(self) -> Message:
        return Message(self.code, b"")

    def continues(self) -> bool:
        return self.code == _RSP_CONTINUE


RESP_ACCEPT = SimpleResponse(_RSP_ACCEPT)
RESP_CONTINUE = SimpleResponse(_RSP_CONTINUE)
RESP_DISCARD = SimpleResponse(_RSP_DISCARD)
RESP_REJECT = SimpleResponse(_RSP_REJECT)
RESP_TEMPFAIL = SimpleResponse(_RSP_TEMPFAIL)


@dataclass(frozen=True)
class CustomResponse(Response):
    """A response with an arbitrary code and payload."""

    code: int
    data: bytes = field(default=b"")

    def response(self) -> Message:
        return Message(self.code, self.data)

    def continues(self) -> bool:
        return self.code not in _STOP_CODES


def new_response(code: int | str | bytes, data: bytes) -> CustomResponse:
    """Build a response with the given code and raw payload."""
    return CustomResponse(_as_code(code), bytes(data))


def new_response_str(code: int | str | bytes, data: str) -> CustomResponse:
    """Build a response whose payload is ``data`` as a NUL-terminated string."""
    return new_response(code, (data + "\x00").encode("utf-8", "surrogateescape"))