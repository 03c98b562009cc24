# milterkit

`milterkit` is a library for writing mail filters in Python that speak the
milter protocol to an MTA such as Postfix or Sendmail. You write a handler
class and choose which actions and protocol steps you want. `run_server`
then runs a session for every connection the MTA opens.

## Installing

```
pip install .
```

The package uses only the standard library.

## Writing a filter

Subclass `milterkit.milter.Milter` and override the callbacks you need:

- `connect(host, family, port, addr, modifier)`
- `helo(name, modifier)`
- `mail_from(sender, modifier)`
- `rcpt_to(rcpt, modifier)`
- `header(name, value, modifier)`
- `headers(headers, modifier)`
- `body_chunk(chunk, modifier)`
- `body(modifier)`

Each callback returns a response. Any callback you do not override returns
the class attribute `default_response`, which is `RESP_CONTINUE` unless you
set another one. An exception raised from a callback ends the session.

`family` is one of `"unknown"`, `"unix"`, `"tcp4"` or `"tcp6"`. `addr` is
an `ipaddress` address, or `None` when the MTA sent no valid IP address.
Angle brackets are stripped from the sender and recipient addresses.

```python
import socket

from milterkit.message import RESP_ACCEPT, RESP_CONTINUE, RESP_REJECT
from milterkit.milter import Milter
from milterkit.server import run_server
from milterkit.session import OptAction, OptProtocol


class TagFilter(Milter):
    def mail_from(self, sender, modifier):
        if sender.endswith("@example.com"):
            return RESP_CONTINUE
        return RESP_REJECT

    def body(self, modifier):
        modifier.add_header("X-Filtered", "yes")
        return RESP_ACCEPT


def init():
    return TagFilter(), OptAction.ADD_HEADER, OptProtocol.NO_BODY


listener = socket.create_server(("127.0.0.1", 7777))
run_server(listener, init)
```

`run_server(listener, init)` calls `listener.accept()` in a loop. For each
connection it calls `init()`, which returns the handler, the `OptAction`
flags and the `OptProtocol` flags. It then runs a `MilterSession` for the
connection on its own daemon thread. The loop never returns. An error from
`accept` is raised to the caller.

## Responses

`milterkit.message` provides the ready-made responses `RESP_ACCEPT`,
`RESP_CONTINUE`, `RESP_DISCARD`, `RESP_REJECT` and `RESP_TEMPFAIL`. These
are `SimpleResponse` instances.

`new_response(code, data)` builds a `CustomResponse` from any code and a raw
payload. `new_response_str(code, data)` does the same with a string, which
it sends NUL-terminated. The code may be an int, a one-character string or
a single byte.

A session stops after it sends an accept, discard, reject or temp-fail
reply.

## Changing a message

A `Modifier` is passed to every callback. Its `macros` attribute holds the
macros last defined by the MTA. Its `headers` attribute holds the headers
seen so far as a `MimeHeader`, or `None` before the first header arrives.
`MimeHeader` matches names without regard to case and keeps every value
added for a name. You can read it with `get`, `values`, `items`, `in` and
indexing.

The modifier also sends change requests to the MTA:

- `add_recipient(rcpt)`, `delete_recipient(rcpt)`
- `add_header(name, value)`
- `change_header(index, name, value)`, `insert_header(index, name, value)`
- `change_from(value)`
- `replace_body(body)`
- `quarantine(reason)`

Each request goes out as soon as you call it. By the milter protocol, the
MTA accepts such requests only at the end of the message, in `body`, and
only for the actions you negotiated with `OptAction`.

## Sessions

A `MilterSession` works with any object that has `recv`, `sendall` and
`close`. `handle_milter_commands()` reads packets until the peer
disconnects, sends `Q`, sends an unknown command, or gets a final reply.
It then closes the socket. You can also drive a session one command at a
time with `read_packet()`, `process(msg)` and `write_packet(msg)`. The
session offers protocol version 2 to the MTA during option negotiation.

## What it does not do

`milterkit` is a library only. It has no command-line program, no
configuration file and no way of its own to open a listening socket. Your
code creates the listener and calls `run_server`.

## Running the tests

```
pip install .[test]
pytest
```