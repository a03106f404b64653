"""Module entrypoint for `python -m treepath`."""

from treepath import cli


if __name__ == "__main__":
    cli.main()
