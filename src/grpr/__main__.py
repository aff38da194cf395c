"""Entry point for ``python -m grpr``."""

from .cli import main

if __name__ == "__main__":
    main()
