"""Entry point de desarrollo sin instalación.

Uso:
- `python -m main resolver --lat -34.60 --lng -58.38`
- `python -m main serve`

El código vive en `src/`; sin `pip install -e .` Python no encuentra `cli`, `core`, etc.
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
    src = Path(__file__).resolve().parent / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))

    # Consolas Windows con cp1252 rompen los acentos de Rich.
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
