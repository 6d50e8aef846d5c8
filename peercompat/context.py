"""
Shared context object for peercompat CLI commands.

This module defines the global Click context used to share configuration
and runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from peercompat.config import PeerCompatConfig


class PeerCompatContext:
    """Global context object for peercompat CLI commands.

    Attributes:
        config_path: Path to the configuration file, if any.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: PeerCompatConfig = PeerCompatConfig()


#: Click decorator for injecting :class:`PeerCompatContext` into commands.
pass_context = click.make_pass_decorator(PeerCompatContext, ensure=True)
