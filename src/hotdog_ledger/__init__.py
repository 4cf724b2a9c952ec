"""Hot Dog Ledger — an event-sourced tally bot for chat servers.

Users log how many hot dogs they ate, contest each other's claims through a
two-party protest workflow, and rank themselves on a leaderboard. Every change
is an immutable row in a SQLite ledger; totals and statistics are always
derived from that ledger, never stored.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("hotdog-ledger")
except PackageNotFoundError:
    __version__ = "0.1.0"
