"""CLI application for warehouse storage cleanup."""

import typer

from storagegc.cli.commands.cleanup import cleanup, snapshot
from storagegc.cli.common.logs import setup_logging
from storagegc.cli.common.options import VerboseOpt

app = typer.Typer(
    help="storagegc - find and delete warehouse storage no longer referenced by metadata",
    no_args_is_help=True,
)


@app.callback()
def _init(verbose: bool = VerboseOpt):
    """Configure logging once per invocation."""
    setup_logging(verbose)


app.command("cleanup")(cleanup)
app.command("snapshot")(snapshot)


if __name__ == "__main__":
    app()
