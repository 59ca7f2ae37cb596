"""Module entrypoint for running the CLI as ``python -m bubbles_cafe``."""

from __future__ import annotations

from bubbles_cafe.cli import main


if __name__ == "__main__":
    main()
