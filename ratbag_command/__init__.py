"""
ratbag-command package.

Command-line front end for configuring programmable mice through a
device-abstraction library.  Use ``ratbag-command`` for one-shot commands
or ``ratbag-shell`` for an interactive shell bound to one device.
"""

from __future__ import annotations

from .cli import main

__all__ = ["main"]
__version__ = "0.1.0"
