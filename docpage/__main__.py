"""Module entrypoint for ``python -m docpage``.

All argument parsing and runtime setup happen in ``docpage.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
