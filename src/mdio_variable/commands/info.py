"""MDIO Variable information command."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from typing import Annotated
from typing import Any

import click
import typer
from rich.console import Console
from rich.table import Table

from mdio_variable.core.storage_location import StorageLocation
from mdio_variable.exceptions import MDIOError

if TYPE_CHECKING:
    from click.core import Context
    from click.core import Parameter

    from mdio_variable.variable.variable import Variable

app = typer.Typer()


class JSONParamType(click.ParamType):
    """Click parser for JSON."""

    name = "JSON"

    def convert(self, value: str, param: Parameter | None, ctx: Context | None) -> dict[str, Any]:
        """Convert JSON-like string to dict."""
        if isinstance(value, dict):
            return value
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            self.fail(f"{value} is not a valid json string", param, ctx)


def variable_table(variable: Variable) -> Table:
    """Summarize a Variable in a two column table."""
    table = Table(title=f"Variable: {variable.variable_name}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    domain = variable.dimensions
    table.add_row("Long name", variable.long_name or "-")
    table.add_row("Dimensions", str(domain))
    table.add_row("Shape", str(list(domain.shape)))
    table.add_row("Dtype", str(variable.dtype))
    table.add_row("Chunks", str(variable.get_chunk_shape()))
    table.add_row("Attributes", json.dumps(variable.get_attributes()))
    return table


UriType = Annotated[str, typer.Argument(help="Path or URI of the Variable's array.")]
StorageOptionType = Annotated[
    dict | None, typer.Option("--storage-options", help="Options for remote storage.", click_type=JSONParamType())
]


@app.command()
def info(uri: UriType, storage_options: StorageOptionType = None) -> None:
    """Provide information on an MDIO Variable.

    Opens the Variable at URI and prints its name, dimensions, data type, chunking, and
    user attributes.
    """
    from mdio_variable.variable.variable import Variable

    location = StorageLocation(uri, storage_options)
    if not location.exists():
        typer.secho(f"No Variable found at {location}", fg="red", err=True)
        raise typer.Exit(1)

    try:
        variable = Variable.open({"driver": "zarr", "kvstore": location.to_kvstore_spec()})
    except (MDIOError, ValueError) as err:
        typer.secho(str(err), fg="red", err=True)
        raise typer.Exit(1) from None

    Console().print(variable_table(variable))
