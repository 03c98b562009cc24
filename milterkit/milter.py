"""Callback interface implemented by mail filters."""

from __future__ import annotations

from ipaddress import IPv4Address, IPv6Address
from typing import TYPE_CHECKING

from milterkit.message import RESP_CONTINUE, MimeHeader, Response

if TYPE_CHECKING:
    from milterkit.modifier import Modifier


class Milter:
    """Base class for milter callback handlers.

    Every callback returns a :class:`Response`. A stage that a subclass does
    not override answers with ``default_response``, which continues
    processing unless a subclass sets it otherwise. Raising an exception
    from a callback aborts the session.
    """

    default_response: Response = RESP_CONTINUE

    def _unhandled(self) -> Response:
        return self.default_response

    def connect(
        self,
        host: str,
        family: str,
        port: int,
        addr: IPv4Address | IPv6Address | None,
        modifier: Modifier,
    ) -> Response:
        """Handle SMTP connection data for an incoming message."""
        return self._unhandled()

    def helo(self, name: str, modifier: Modifier) -> Response:
        """Handle the HELO/EHLO name."""
        return self._unhandled()

    def mail_from(self, sender: str, modifier: Modifier) -> Response:
        """Handle the envelope sender address."""
        return self._unhandled()

    def rcpt_to(self, rcpt: str, modifier: Modifier) -> Response:
        """Handle one envelope recipient address."""
        return self._unhandled()

    def header(self, name: str, value: str, modifier: Modifier) -> Response:
        """Handle a single message header."""
        return self._unhandled()

    def headers(self, headers: MimeHeader | None, modifier: Modifier) -> Response:
        """Handle the end of the message headers."""
        return self._unhandled()

    def body_chunk(self, chunk: bytes, modifier: Modifier) -> Response:
        """Handle the next chunk of the message body (up to 64KB)."""
        return self._unhandled()

    def body(self, modifier: Modifier) -> Response:
        """Handle the end of the message; all modifications belong here."""
        return self._unhandled()