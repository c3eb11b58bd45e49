"""Run script.

Allows `python -m main` from inside `src/` during development, next to the
`envshell` console script.
"""

from __future__ import annotations

import sys

# Windows terminals may default to cp1252.
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")

from cli.main import run_cli


def main() -> None:
    run_cli()


if __name__ == "__main__":
    main()
