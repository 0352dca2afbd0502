"""Common CLI options for the CLI."""

import typer

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help="Databricks CLI profile (from ~/.databrickscfg)",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log every keep/drop decision (DEBUG)",
)

DeleteOpt = typer.Option(
    False,
    "--delete",
    help="Delete the unused storage (default: only report it)",
)

ForceOpt = typer.Option(
    False,
    "--force",
    help="Warning: drop ALL intermediate staging tables, even those in use",
)

YesOpt = typer.Option(False, "--yes", help="Skip confirmation prompt")

OnlyOpt = typer.Option(
    [],
    "--only",
    help="Restrict to a domain: staging, filesystem or columnar. Reusable.",
    show_default=False,
)
