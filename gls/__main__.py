"""Module entrypoint for ``python -m gls``.

This keeps module-mode execution behavior identical to the CLI script.
All argument parsing and listing setup happen in ``gls.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
