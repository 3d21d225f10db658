"""Module entrypoint for ``python -m lazylayout``.

All argument parsing and runtime setup happen in ``lazylayout.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
