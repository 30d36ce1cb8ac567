"""Entrypoint to the MDIO Variable command line interface (CLI)."""

import typer

from mdio_variable.commands import info
from mdio_variable.commands import version

app = typer.Typer(no_args_is_help=True)
app.add_typer(info.app)
app.add_typer(version.app)
