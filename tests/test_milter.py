from ipaddress import ip_address

from milterkit.message import RESP_CONTINUE, RESP_REJECT, MimeHeader, new_response_str
from milterkit.milter import Milter
from milterkit.modifier import Modifier


def _modifier():
    return Modifier(write_packet=lambda msg: None)


def test_default_callbacks_continue():
    milter = Milter()
    mod = _modifier()
    results = [
        milter.connect("mx.example.com", "tcp4", 25, ip_address("192.0.2.1"), mod),
        milter.helo("mx.example.com", mod),
        milter.mail_from("sender@example.com", mod),
        milter.rcpt_to("rcpt@example.com", mod),
        milter.header("Subject", "hi", mod),
        milter.headers(MimeHeader(), mod),
        milter.body_chunk(b"body", mod),
        milter.body(mod),
    ]
    assert all(r == RESP_CONTINUE for r in results)
    assert all(r.continues() for r in results)


class _RejectingMilter(Milter):
    def __init__(self):
        self.seen = []

    def rcpt_to(self, rcpt, modifier):
        self.seen.append(rcpt)
        if rcpt.endswith("@blocked.example.com"):
            return RESP_REJECT
        return RESP_CONTINUE

    def body(self, modifier):
        modifier.add_header("X-Checked", "yes")
        return new_response_str("y", "250 ok")


def test_subclass_overrides_selected_callbacks():
    milter = _RejectingMilter()
    mod = _modifier()
    assert milter.rcpt_to("a@example.com", mod) == RESP_CONTINUE
    assert milter.rcpt_to("b@blocked.example.com", mod) == RESP_REJECT
    assert milter.seen == ["a@example.com", "b@blocked.example.com"]
    assert milter.helo("h.example.com", mod) == RESP_CONTINUE


def test_subclass_body_can_modify_message():
    sent = []
    milter = _RejectingMilter()
    resp = milter.body(Modifier(write_packet=sent.append))
    assert resp.response().data == b"250 ok\x00"
    assert [m.code for m in sent] == [ord("h")]
    assert sent[0].data == b"X-Checked\x00yes\x00"