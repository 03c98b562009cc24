"""Message modification actions available to milter callbacks."""

from __future__ import annotations

import struct
from collections.abc import Callable
from dataclasses import dataclass, field

from milterkit.message import Message, MimeHeader, new_response


def _cstr(*parts: str) -> bytes:
    return "".join(part + "\x00" for part in parts).encode("utf-8", "surrogateescape")


@dataclass
class Modifier:
    """Gives callbacks access to macros and headers and lets them alter the message."""

    write_packet: Callable[[Message], None]
    macros: dict[str, str] = field(default_factory=dict)
    headers: MimeHeader | None = None

    def _send(self, code: str, data: bytes) -> None:
        self.write_packet(new_response(code, data).response())

    def add_recipient(self, rcpt: str) -> None:
        """Add an envelope recipient."""
        self._send("+", _cstr(f"<{rcpt}>"))

    def delete_recipient(self, rcpt: str) -> None:
        """Remove an envelope recipient."""
        self._send("-", _cstr(f"<{rcpt}>"))

    def replace_body(self, body: bytes) -> None:
        """Replace the message body with ``body``."""
        self._send("b", bytes(body))

    def add_header(self, name: str, value: str) -> None:
        """Append a header to the message."""
        self._send("h", _cstr(name, value))

    def quarantine(self, reason: str) -> None:
        """Hold the message in quarantine for ``reason``."""
        self._send("q", _cstr(reason))

    def change_header(self, index: int, name: str, value: str) -> None:
        """Replace the ``index``-th occurrence of header ``name``."""
        self._send("m", struct.pack(">I", index & 0xFFFFFFFF) + _cstr(name, value))

    def insert_header(self, index: int, name: str, value: str) -> None:
        """Insert a header at position ``index``."""
        self._send("i", struct.pack(">I", index & 0xFFFFFFFF) + _cstr(name, value))

    def change_from(self, value: str) -> None:
        """Replace the envelope sender."""
        self._send("e", _cstr(value))