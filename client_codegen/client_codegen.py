import json
import logging
import sys
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .errors import EmitError, SchemaParseError
from .pipeline import AtomicWriter, ClientTypesGenerator, CodeGeneratorConfig, OutputMode, RegistryScope
from .pipeline.config import LANGUAGES
from .schema import parse_schema

logger = logging.getLogger(__name__)


@click.command()
@click.option("--language", "-l", default=None, type=click.Choice(LANGUAGES), help="Target language (default: python)")
@click.option("--package", "-p", default=None, type=str, help="Import path of the generated service packages")
@click.option(
    "--scope",
    default=None,
    type=click.Choice([s.value for s in RegistryScope]),
    help="Deduplicate type declarations per service or across the whole run",
)
@click.option("--workers", "-w", default=None, type=click.IntRange(min=1), help="Number of services generated in parallel")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--force", is_flag=True, default=False, help="Overwrite existing output files")
@click.option("--format", "format_code", is_flag=True, default=False, help="Format generated Python code with black")
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("schema", type=click.Path(exists=True, resolve_path=True))
@click.argument("output_dir", type=click.Path(file_okay=False, resolve_path=True))
def client_codegen(language, package, scope, workers, config, force, format_code, verbose, schema, output_dir):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if config is not None:
        with open(config) as f:
            config = CodeGeneratorConfig.from_dict(json.load(f))
    else:
        config = CodeGeneratorConfig()

    # CLI flags override the config file
    if language is not None:
        config.language = language
    if package is not None:
        config.package = package
    if scope is not None:
        config.registry_scope = RegistryScope(scope)
    if workers is not None:
        config.max_workers = workers
    if force:
        config.output.mode = OutputMode.FORCE
    if format_code:
        config.formatter.enabled = True

    with open(schema) as f:
        try:
            model = parse_schema(json.load(f))
        except (json.JSONDecodeError, SchemaParseError) as e:
            raise click.ClickException(f"Cannot load {schema}: {e}") from e

    generator = ClientTypesGenerator(model, config, reconstruct_command_line(client_codegen))
    report = generator.generate()

    writer = AtomicWriter()
    failed = bool(report.failures)
    for result in report.results:
        if result.error is not None:
            click.echo(f"FAILED {result.service}: {result.error}", err=True)
            continue
        path = Path(output_dir) / result.artifact.path
        try:
            if config.output.mode == OutputMode.FORCE:
                writer.write(path, result.artifact.text, config.language, config.output.validate_before_write)
            else:
                writer.write_if_not_exists(path, result.artifact.text, config.language, config.output.validate_before_write)
        except (FileExistsError, EmitError) as e:
            logger.error("Cannot write %s: %s", path, e)
            click.echo(f"FAILED {result.service}: {e}", err=True)
            failed = True
            continue
        click.echo(f"{result.service}: {path}")

    if failed:
        sys.exit(1)
