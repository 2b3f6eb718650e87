"""Entry point for `python -m jpath`."""

from jpath import cli


if __name__ == "__main__":
    cli.main()
