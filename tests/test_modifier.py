import pytest

from milterkit.message import Message, MimeHeader
from milterkit.modifier import Modifier


@pytest.fixture
def sent():
    return []


@pytest.fixture
def modifier(sent):
    return Modifier(write_packet=sent.append)


def test_defaults():
    mod = Modifier(write_packet=lambda msg: None)
    assert mod.macros == {}
    assert mod.headers is None


def test_carries_macros_and_headers():
    headers = MimeHeader()
    headers.add("From", "a@example.com")
    mod = Modifier(write_packet=lambda msg: None, macros={"j": "mx"}, headers=headers)
    assert mod.macros["j"] == "mx"
    assert mod.headers.get("from") == "a@example.com"


def test_add_recipient(modifier, sent):
    modifier.add_recipient("new@example.com")
    assert sent == [Message(ord("+"), b"<new@example.com>\x00")]


def test_delete_recipient(modifier, sent):
    modifier.delete_recipient("old@example.com")
    assert sent == [Message(ord("-"), b"<old@example.com>\x00")]


def test_replace_body(modifier, sent):
    modifier.replace_body(b"new body\r\n")
    assert sent == [Message(ord("b"), b"new body\r\n")]


def test_add_header(modifier, sent):
    modifier.add_header("X-Filter", "done")
    assert sent == [Message(ord("h"), b"X-Filter\x00done\x00")]


def test_quarantine(modifier, sent):
    modifier.quarantine("suspicious")
    assert sent == [Message(ord("q"), b"suspicious\x00")]


def test_change_header(modifier, sent):
    modifier.change_header(3, "Subject", "changed")
    assert sent == [Message(ord("m"), b"\x00\x00\x00\x03Subject\x00changed\x00")]


def test_insert_header(modifier, sent):
    modifier.insert_header(0, "X-First", "1")
    assert sent == [Message(ord("i"), b"\x00\x00\x00\x00X-First\x001\x00")]


def test_change_header_negative_index_wraps(modifier, sent):
    modifier.change_header(-1, "A", "")
    assert sent == [Message(ord("m"), b"\xff\xff\xff\xffA\x00\x00")]


def test_change_from(modifier, sent):
    modifier.change_from("<bounce@example.com>")
    assert sent == [Message(ord("e"), b"<bounce@example.com>\x00")]


def test_write_errors_propagate():
    def failing(msg):
        raise OSError("broken pipe")

    mod = Modifier(write_packet=failing)
    with pytest.raises(OSError, match="broken pipe"):
        mod.add_header("X", "y")


def test_packets_sent_in_call_order(modifier, sent):
    modifier.add_recipient("a@example.com")
    modifier.quarantine("r")
    modifier.change_from("b@example.com")
    assert sent == [
        Message(ord("+"), b"<a@example.com>\x00"),
        Message(ord("q"), b"r\x00"),
        Message(ord("e"), b"b@example.com\x00"),
    ]