"""Validation CLI commands: validate and types."""

import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click
import yaml

from structcheck.config import ValidatorConfig
from structcheck.registry import TypeRegistry
from structcheck.validator import StructValidator


def _load(path: Path) -> Any:
    """Load a YAML (or JSON) document, exiting with status 2 if it does not parse."""
    try:
        with path.open() as fh:
            return yaml.safe_load(fh)
    except yaml.YAMLError as e:
        click.echo(f"Error: cannot parse {path}: {e}", err=True)
        raise SystemExit(2)


def _parse_type_option(value: str) -> tuple[str, re.Pattern[str]]:
    name, sep, pattern = value.partition("=")
    if not sep or not name:
        raise click.BadParameter(f"expected NAME=REGEX, got '{value}'", param_hint="--type")
    try:
        return name, re.compile(pattern)
    except re.error as e:
        raise click.BadParameter(f"invalid regex for '{name}': {e}", param_hint="--type")


@click.command()
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("data_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--type",
    "extra_types",
    multiple=True,
    metavar="NAME=REGEX",
    help="Register an extra pattern type for this run. Repeatable.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print errors as JSON.")
@click.option("--debug", is_flag=True, default=False, help="Trace every clause to stderr.")
def validate(
    schema_path: Path,
    data_path: Path,
    extra_types: tuple[str, ...],
    as_json: bool,
    debug: bool,
):
    """Validate DATA_PATH against the type specs in SCHEMA_PATH."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    schema = _load(schema_path)
    if not isinstance(schema, Mapping):
        click.echo(f"Error: schema {schema_path} is not a mapping", err=True)
        raise SystemExit(2)

    data = _load(data_path)

    validator = StructValidator(schema, config=ValidatorConfig(debug=debug))
    for option in extra_types:
        name, pattern = _parse_type_option(option)
        validator.register_type(name, pattern)

    valid = validator.validate(data)
    errors = validator.errors()

    if as_json:
        click.echo(
            json.dumps(
                {"valid": valid, "errors": [e.to_dict() for e in errors]},
                indent=2,
            )
        )
    else:
        for error in errors:
            line = str(error)
            if error.detail:
                line += f" ({error.detail})"
            click.echo(click.style(line, fg="red"))
        if valid:
            click.echo(click.style(f"{data_path} is valid.", fg="green", bold=True))
        else:
            click.echo(
                click.style(f"\n{len(errors)} error(s) found", fg="red", bold=True)
            )

    if not valid:
        raise SystemExit(1)


@click.command("types")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print as JSON.")
def types_cmd(as_json: bool):
    """List the available types."""
    described = TypeRegistry().describe()

    if as_json:
        click.echo(json.dumps(described, indent=2))
        return

    for name, info in described.items():
        line = f"  {name:<16} {info['kind']:<10} {info['description']}"
        click.echo(line.rstrip())
    click.echo("\nEvery type can be negated with the 'no' prefix, e.g. 'noint'.")
