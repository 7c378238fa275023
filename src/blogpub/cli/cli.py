"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from blogpub.cli.commands import (
    categories_cmd,
    export_cmd,
    list_cmd,
    related_cmd,
    render_cmd,
    show_cmd,
    tags_cmd,
)


app = typer.Typer(name="blogpub", no_args_is_help=True, help="Blog content resolution and rendering")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log source selection and skipped documents")] = False,
    ):
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
app.command(name="related")(related_cmd)
app.command(name="categories")(categories_cmd)
app.command(name="tags")(tags_cmd)
app.command(name="render")(render_cmd)
app.command(name="export")(export_cmd)
