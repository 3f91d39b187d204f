"""Command-line interface for decoding JSON documents against a schema."""

from __future__ import annotations

import json
import logging

import click
from rich.console import Console
from rich.table import Table

from jsonproto.proto.config import Base64Variant, DecodeConfig, UnknownPropertyPolicy
from jsonproto.proto.errors import DecodeError
from jsonproto.proto.message import MessageBuilder
from jsonproto.proto.naming import NamingPolicy, translate
from jsonproto.proto.tokens import TokenError
from jsonproto.schema.parser import ValidationError, parse
from jsonproto.schema.pool import DescriptorPool
from jsonproto.schema.types import SchemaFile


def _read_schema(schema_file: str) -> SchemaFile:
    with open(schema_file, encoding="utf-8") as f:
        text = f.read()

    try:
        return parse(text)
    except ValidationError as err:
        raise click.ClickException(f"{schema_file}: {err}") from err


@click.group()
def cli() -> None:
    """Schema-driven JSON to message decoder."""


@cli.command()
@click.option("--schema", "-s", "schema_file", required=True, help="Schema definition file")
@click.option("--type", "-t", "type_name", required=True, help="Message type to decode")
@click.option("--input", "-i", "input_file", default="-", help="JSON document (default: stdin)")
@click.option(
    "--naming",
    type=click.Choice([policy.value for policy in NamingPolicy]),
    default=NamingPolicy.LOWER_CAMEL_CASE.value,
    help="Property naming policy",
)
@click.option("--skip-unknown", is_flag=True, help="Skip properties that match no field")
@click.option("--single-value-as-array", is_flag=True, help="Accept a single value for repeated fields")
@click.option("--fail-on-null-primitives", is_flag=True, help="Reject null for numbers and booleans")
@click.option("--empty-enum-as-null", is_flag=True, help="Treat empty enum names as null")
@click.option("--no-enum-numbers", is_flag=True, help="Reject numbers for enum fields")
@click.option("--ignore-unknown-enums", is_flag=True, help="Drop unknown enum values instead of failing")
@click.option("--url-safe-base64", is_flag=True, help="Decode bytes fields with the URL-safe alphabet")
@click.option("--verbose", "-v", is_flag=True, help="Log decoding details")
def decode(
    schema_file: str,
    type_name: str,
    input_file: str,
    naming: str,
    skip_unknown: bool,
    single_value_as_array: bool,
    fail_on_null_primitives: bool,
    empty_enum_as_null: bool,
    no_enum_numbers: bool,
    ignore_unknown_enums: bool,
    url_safe_base64: bool,
    verbose: bool,
) -> None:
    """Decode a JSON document and print the message as JSON."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    pool = DescriptorPool.from_schema(_read_schema(schema_file))
    policy = NamingPolicy(naming)
    config = DecodeConfig(
        accept_single_value_as_array=single_value_as_array,
        fail_on_null_for_primitives=fail_on_null_primitives,
        accept_empty_string_as_null_for_enum=empty_enum_as_null,
        fail_on_numbers_for_enums=no_enum_numbers,
        ignore_unknown_enum_values=ignore_unknown_enums,
        on_unknown_property=UnknownPropertyPolicy.SKIP if skip_unknown else UnknownPropertyPolicy.FAIL,
        name_translation=policy,
        base64_variant=Base64Variant.URL_SAFE if url_safe_base64 else Base64Variant.STANDARD,
    )

    try:
        decoder = pool.decoder(type_name)
    except KeyError as err:
        raise click.ClickException(str(err.args[0])) from err

    with click.open_file(input_file, encoding="utf-8") as f:
        text = f.read()

    try:
        message = decoder.decode_json(text, config)
    except (DecodeError, TokenError, ValidationError) as err:
        raise click.ClickException(str(err)) from err

    if isinstance(message, MessageBuilder):
        message = message.build()
    print(json.dumps(message.to_dict(policy), indent=2))


@cli.command()
@click.option("--schema", "-s", "schema_file", required=True, help="Schema definition file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option(
    "--naming",
    type=click.Choice([policy.value for policy in NamingPolicy]),
    default=NamingPolicy.LOWER_CAMEL_CASE.value,
    help="Property naming policy used for the JSON name column",
)
def info(schema_file: str, output_json: bool, naming: str) -> None:
    """Display the messages, enums and extensions of a schema."""
    schema = _read_schema(schema_file)

    if output_json:
        print(schema.to_json(indent=2))
    else:
        _output_plain(DescriptorPool.from_schema(schema), NamingPolicy(naming))


def _output_plain(pool: DescriptorPool, naming: NamingPolicy) -> None:
    """Output schema info using rich text formatting."""
    console = Console()

    for message in pool.messages:
        title = f"[bold cyan]{message.name}[/bold cyan]"
        if message.extendable:
            title += " [dim](extendable)[/dim]"
        console.print(title)

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Field", style="white")
        table.add_column("JSON name", style="green")
        table.add_column("Type", style="yellow")
        table.add_column("Repeated", style="dim")

        fields = list(pool.fields_of(message)) + [ext.descriptor for ext in pool.extensions_of(message)]
        for field in fields:
            type_name = str(field.semantic_type)
            if field.enum_type is not None:
                type_name = f"{type_name} ({field.enum_type.name})"
            elif field.message_type is not None:
                type_name = f"{type_name} ({field.message_type.name})"
            if field.is_extension:
                type_name += ", extension"
            table.add_row(field.name, translate(naming, field.name), type_name, "yes" if field.repeated else "")

        console.print(table)
        console.print()

    if pool.enums:
        console.print("[bold cyan]Enums[/bold cyan]")
        enum_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        enum_table.add_column("Name", style="white")
        enum_table.add_column("Values", style="yellow")
        for enum in pool.enums:
            enum_table.add_row(enum.name, ", ".join(f"{v.name}={v.number}" for v in enum.values))
        console.print(enum_table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
