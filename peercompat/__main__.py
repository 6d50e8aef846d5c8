"""
Executable module for peercompat.

Running ``python -m peercompat`` is equivalent to running ``peercompat``.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Explain on stderr why the CLI could not be imported."""
    sys.stderr.write("peercompat CLI could not be loaded.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    try:
        from peercompat.__version__ import __version__

        sys.stderr.write(f"peercompat version: {__version__}\n")
    except ImportError:
        sys.stderr.write("peercompat version: <unknown>\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """Main entrypoint when executing ``python -m peercompat``."""
    try:
        # Imported lazily so a broken install still reports a readable error
        from peercompat.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
