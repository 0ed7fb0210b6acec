"""Entry point for ``python -m uds.cli``."""

from uds.cli.main import main


if __name__ == "__main__":
    main()
