"""Entry point for ``python -m uds``."""

from uds.cli.main import main


if __name__ == "__main__":
    main()
