"""Version command."""

import typer

from mdio_variable import __version__

app = typer.Typer()


@app.command()
def version() -> None:
    """Print the version of the CLI."""
    print(f"MDIO Variable CLI Version {__version__}")
