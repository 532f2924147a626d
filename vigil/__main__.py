"""Module entrypoint for ``python -m vigil``.

Behaves exactly like the ``vigil`` console script.
"""

from .cli import main


if __name__ == "__main__":
    main()
