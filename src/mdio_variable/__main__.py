"""Command-line interface."""

from mdio_variable.cli import app


def main() -> None:
    """Run the MDIO Variable CLI."""
    app()


if __name__ == "__main__":
    main()
