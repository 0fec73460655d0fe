import json
import logging

import click

from .cli_utils import reconstruct_command_line
from .pipeline import CodeGenerationPipeline, ConfigError, GenerationFailedError, GeneratorConfig
from .schema import ParsedSchema


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True), help="JSON generator configuration")
@click.option("--registry", is_flag=True, default=False, help="Generate one consolidated registry instead of per-model layers")
@click.option("--fail-fast", is_flag=True, default=False, help="Stop on the first error")
@click.option("--strict-plugins", is_flag=True, default=False, help="Abort when a plugin fails validation")
@click.option("--output", "-o", default=None, type=click.Path(resolve_path=True), help="Write the generated files as JSON")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every phase")
@click.argument("schema", type=click.Path(exists=True, resolve_path=True))
def modelgen(config, registry, fail_fast, strict_plugins, output, verbose, schema):
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    with open(schema) as f:
        parsed_schema = ParsedSchema.from_dict(json.load(f))

    if config is not None:
        with open(config) as f:
            generator_config = GeneratorConfig.from_dict(json.load(f))
    else:
        generator_config = GeneratorConfig()

    # CLI flags override the config file
    if registry:
        generator_config.use_registry = True
    if fail_fast:
        generator_config.fail_fast = True
    if strict_plugins:
        generator_config.strict_plugin_validation = True

    try:
        pipeline = CodeGenerationPipeline(parsed_schema, generator_config)
        files = pipeline.run()
    except ConfigError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    except GenerationFailedError as e:
        raise click.ClickException(f"Generation failed: {e}") from e

    for layer, count in files.layer_counts().items():
        if count:
            click.echo(f"{layer:<12} {count:>4} files")
    summary = files.summary
    click.echo(f"Total: {files.total_files()} files, {summary.error} errors, {summary.warning} warnings")

    if output is not None:
        data = files.to_dict()
        data["command"] = reconstruct_command_line(modelgen)
        with open(output, "w") as f:
            json.dump(data, f, indent=2)
        click.echo(f"Wrote {output}")
