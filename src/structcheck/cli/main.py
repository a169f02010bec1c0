"""structcheck CLI entry point."""

import click


@click.group()
def cli():
    """structcheck: validate YAML/JSON data against a type-spec schema."""
    pass


# Register subcommands
from structcheck.cli.validate_cmd import types_cmd, validate  # noqa: E402

cli.add_command(validate)
cli.add_command(types_cmd)
