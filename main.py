"""Arranque local de `avatar-fetch` sin instalar el paquete.

Uso:
- `python main.py fetch https://instagram.com/<user> --download`
- `python main.py resolve twitter jack --json -`

El código vive en `src/`; aquí solo se añade esa carpeta a `sys.path` y se
delega en `cli.main.run` (el mismo callable que expone el script de pyproject).
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def _prepare_environment() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))
    # Rich prints bullets; Windows consoles default to cp1252.
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")


def main() -> None:
    _prepare_environment()
    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
