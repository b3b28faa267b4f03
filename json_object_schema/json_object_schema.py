import json
import logging
import sys

import click

from .cli_utils import reconstruct_command_line
from .codegen import RecordCodeGenerator
from .config import CompilerConfig
from .errors import ConfigurationError, ParseError
from .loader import DescriptorLoader
from .registry import Registry


def _load(path, config):
    try:
        loader = DescriptorLoader.from_file(path, config)
        loader.load()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    return loader


@click.group()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log compilation and registration steps")
@click.pass_context
def json_object_schema(ctx, config, verbose):
    """Compile record type descriptors into JSON codecs and OpenAPI schemas."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    if config is not None:
        with open(config) as f:
            config = CompilerConfig.from_dict(json.load(f))
    else:
        config = CompilerConfig()
    ctx.obj = config


@json_object_schema.command()
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default="-", type=click.File("w"))
@click.pass_obj
def export(config, path, output):
    """Write the component schemas of every type declared in PATH."""
    loader = _load(path, config)
    registry = loader.register_all(Registry(ref_prefix=config.ref_prefix))
    document = {"components": {"schemas": registry.export()}}
    output.write(json.dumps(document, indent=config.output_indent))
    output.write("\n")


@json_object_schema.command()
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.argument("type_name")
@click.argument("input", default="-", type=click.File("r"))
@click.pass_obj
def parse(config, path, type_name, input):
    """Parse INPUT as TYPE_NAME and print it re-serialized."""
    loader = _load(path, config)
    try:
        schema_type = loader.resolve_public_name(type_name)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    try:
        value = json.load(input)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"invalid JSON input: {e}") from e

    try:
        instance = schema_type.parse(value)
    except ParseError as e:
        location = e.path_str or "<root>"
        raise click.ClickException(f"{location}: {e.leaf}") from e

    click.echo(json.dumps(schema_type.serialize(instance), indent=config.output_indent))


@json_object_schema.command()
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", type=click.Path(resolve_path=True))
@click.pass_obj
def generate(config, path, output):
    """Write a Python module declaring a dataclass per type declared in PATH."""
    loader = _load(path, config)
    comment = f"Generated by {reconstruct_command_line(generate)}"
    out = RecordCodeGenerator(loader.compiled, config, generation_comment=comment).generate()
    with open(output, "w") as f:
        f.write(out)
