"""Entry point for ``python -m facestream``."""

from .cli import main

if __name__ == "__main__":
    main()
