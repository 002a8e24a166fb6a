"""Module entrypoint for running contexttrans as ``python -m contexttrans``."""

from __future__ import annotations

from contexttrans.cli import main


if __name__ == "__main__":
    main()
