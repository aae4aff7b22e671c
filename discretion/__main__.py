"""Entrypoint for `python -m discretion`."""

from .cli import main


if __name__ == "__main__":
    main()
