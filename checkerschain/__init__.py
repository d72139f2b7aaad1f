"""Checkers with wagers, move deadlines and an expiry queue, run as a ledger module."""

__version__ = "0.1.0"

__all__ = [
    "bank",
    "endblock",
    "errors",
    "genesis",
    "keeper",
    "messages",
    "msg_server",
    "queries",
    "rules",
    "types",
]