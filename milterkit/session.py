"""Per-connection state and command processing for the milter protocol."""

from __future__ import annotations

import enum
import ipaddress
import logging
import struct
from dataclasses import dataclass, field
from itertools import pairwise
from typing import Protocol

from milterkit.cstrings import decode_cstrings, read_cstring
from milterkit.message import (
    RESP_CONTINUE,
    RESP_TEMPFAIL,
    CloseSession,
    MacroNoData,
    Message,
    MimeHeader,
    Response,
    new_response,
)
from milterkit.milter import Milter
from milterkit.modifier import Modifier

log = logging.getLogger(__name__)

_LENGTH = struct.Struct(">I")
_PROTOCOL_VERSION = 2
_IPV6_PREFIX = b"IPv6:"

_FAMILIES = {
    ord("U"): "unknown",
    ord("L"): "unix",
    ord("4"): "tcp4",
    ord("6"): "tcp6",
}


class OptAction(enum.IntFlag):
    """Actions the milter wants to perform; combine with ``|``."""

    ADD_HEADER = 0x01
    CHANGE_BODY = 0x02
    ADD_RCPT = 0x04
    REMOVE_RCPT = 0x08
    CHANGE_HEADER = 0x10
    QUARANTINE = 0x20
    CHANGE_FROM = 0x40


class OptProtocol(enum.IntFlag):
    """Parts of the SMTP transaction the milter does not want to see."""

    NO_CONNECT = 0x01
    NO_HELO = 0x02
    NO_MAIL_FROM = 0x04
    NO_RCPT_TO = 0x08
    NO_BODY = 0x10
    NO_HEADERS = 0x20
    NO_EOH = 0x40


class _Socket(Protocol):
    def recv(self, bufsize: int) -> bytes: ...

    def sendall(self, data: bytes) -> None: ...

    def close(self) -> None: ...


def _decode(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


@dataclass
class MilterSession:
    """State of one MTA connection and the dispatcher for its commands."""

    actions: OptAction | int
    protocol: OptProtocol | int
    sock: _Socket
    milter: Milter
    headers: MimeHeader | None = None
    macros: dict[str, str] = field(default_factory=dict)

    def _read_exact(self, size: int) -> bytes:
        chunks = bytearray()
        while len(chunks) < size:
            chunk = self.sock.recv(size - len(chunks))
            if not chunk:
                if not chunks:
                    raise EOFError("connection closed")
                raise ConnectionError("unexpected end of stream")
            chunks += chunk
        return bytes(chunks)

    def read_packet(self) -> Message:
        """Read one packet from the socket.

        Raises EOFError when the peer closes the connection before a packet,
        ConnectionError when it closes in the middle of one.
        """
        (length,) = _LENGTH.unpack(self._read_exact(_LENGTH.size))
        if length == 0:
            raise ValueError("empty milter packet")
        data = self._read_exact(length)
        return Message(data[0], data[1:])

    def write_packet(self, msg: Message) -> None:
        """Send one packet to the socket."""
        payload = bytes(msg.data)
        self.sock.sendall(_LENGTH.pack(len(payload) + 1) + bytes([msg.code]) + payload)

    def _modifier(self) -> Modifier:
        return Modifier(
            write_packet=self.write_packet, macros=self.macros, headers=self.headers
        )

    def _connect(self, data: bytes) -> Response | None:
        host_raw, sep, rest = data.partition(b"\x00")
        if not sep or not rest:
            raise ValueError("malformed connect command")
        hostname = _decode(host_raw)
        family_code = rest[0]
        rest = rest[1:]
        port = 0
        if family_code in (ord("4"), ord("6")):
            if len(rest) < 2:
                return RESP_TEMPFAIL
            (port,) = struct.unpack(">H", rest[:2])
            rest = rest[2:]
            if family_code == ord("6") and rest.startswith(_IPV6_PREFIX):
                rest = rest[len(_IPV6_PREFIX):]
        try:
            addr = ipaddress.ip_address(read_cstring(rest))
        except ValueError:
            addr = None
        return self.milter.connect(
            hostname, _FAMILIES.get(family_code, ""), port, addr, self._modifier()
        )

    def _define_macros(self, data: bytes) -> None:
        if not data:
            raise MacroNoData()
        self.macros = {}
        for key, value in pairwise(decode_cstrings(data[1:])):
            self.macros[key] = value

    def _header(self, data: bytes) -> Response | None:
        if self.headers is None:
            self.headers = MimeHeader()
        fields = decode_cstrings(data)
        if not fields:
            return RESP_CONTINUE
        name = fields[0]
        value = fields[1] if len(fields) == 2 else ""
        self.headers.add(name, value)
        return self.milter.header(name, value, self._modifier())

    def process(self, msg: Message) -> Response | None:
        """Handle one command; return the reply to send, or None for no reply.

        Raises CloseSession when the session should end.
        """
        code = chr(msg.code)
        data = bytes(msg.data)
        match code:
            case "A":
                self.headers = None
                self.macros = {}
                return None
            case "B":
                return self.milter.body_chunk(data, self._modifier())
            case "C":
                return self._connect(data)
            case "D":
                self._define_macros(data)
                return None
            case "E":
                return self.milter.body(self._modifier())
            case "H":
                name = _decode(data).removesuffix("\x00")
                return self.milter.helo(name, self._modifier())
            case "L":
                return self._header(data)
            case "M":
                sender = read_cstring(data).strip("<>")
                return self.milter.mail_from(sender, self._modifier())
            case "N":
                return self.milter.headers(self.headers, self._modifier())
            case "O":
                payload = struct.pack(
                    ">III", _PROTOCOL_VERSION, int(self.actions), int(self.protocol)
                )
                return new_response("O", payload)
            case "Q":
                raise CloseSession()
            case "R":
                rcpt = read_cstring(data).strip("<>")
                return self.milter.rcpt_to(rcpt, self._modifier())
            case "T":
                return RESP_CONTINUE
            case _:
                log.warning("Unrecognized command code: %s", code)
                raise CloseSession()

    def handle_milter_commands(self) -> None:
        """Process commands until the connection ends, then close the socket."""
        try:
            while True:
                try:
                    msg = self.read_packet()
                except EOFError:
                    return
                except (OSError, ValueError) as exc:
                    log.error("Error reading milter command: %s", exc)
                    return

                try:
                    resp = self.process(msg)
                except CloseSession:
                    return
                except Exception as exc:
                    log.error("Error performing milter command: %s", exc)
                    return

                if resp is None:
                    continue
                try:
                    self.write_packet(resp.response())
                except OSError as exc:
                    log.error("Error writing packet: %s", exc)
                    return
                if not resp.continues():
                    return
        finally:
            self.sock.close()