"""Public package surface for lazylayout.

Exports ``main`` for programmatic CLI invocation. The layout core lives in
``lazylayout.layout``; the terminal application around it in
``lazylayout.runtime``.
"""

from __future__ import annotations

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["__version__", "main"]
