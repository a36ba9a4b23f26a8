"""Entry point for `python -m hxbuild`."""

from .cli import main

if __name__ == "__main__":
    main()
