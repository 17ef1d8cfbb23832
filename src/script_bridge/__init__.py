"""Script Bridge: event matching and command binding for world scripts.

The bridge sits between a simulated-world host runtime and a script
interpreter.  It turns live world events and textual command invocations
into typed values that scripts can match, read, and answer with
determinations.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("script-bridge")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
