"""Accept loop that runs a milter session for every incoming connection."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, NoReturn

from milterkit.milter import Milter
from milterkit.session import MilterSession, OptAction, OptProtocol

MilterInit = Callable[[], "tuple[Milter, OptAction | int, OptProtocol | int]"]


def run_server(listener: Any, init: MilterInit) -> NoReturn:
    """Serve connections from ``listener`` forever.

    ``init`` is called once per connection and returns the milter together
    with the actions and protocol options to negotiate. Each connection is
    handled on its own thread. Errors from ``accept`` propagate.
    """
    while True:
        client, _ = listener.accept()
        milter, actions, protocol = init()
        session = MilterSession(
            actions=actions, protocol=protocol, sock=client, milter=milter
        )
        threading.Thread(target=session.handle_milter_commands, daemon=True).start()