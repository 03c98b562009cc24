"""Library for writing milter mail filters: handlers, responses, message modifiers and a threaded session server."""

__version__ = "0.1.0"