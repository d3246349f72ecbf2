"""Command-line interface for DXF layer listing and point analysis.

This module provides the main CLI interface using Click for reading the
layers of a DXF file and for analyzing the points of one of its layers.
"""

import json
import logging
import sys
import traceback
from dataclasses import replace
from pathlib import Path

import click

from .config import ConfigurationHandler, sample_config
from .io import DXFReader
from .models import ExtractionConfig, LayerRegistry
from .process import ExtractionResult, PointAnalysis, analyze_points, extract_points


def setup_logging(level: int = logging.WARNING) -> None:
    """Configure the logger of the ``dxfcloud`` namespace to write to stderr."""
    logger = logging.getLogger("dxfcloud")
    logger.setLevel(level)
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"))
    logger.addHandler(handler)


def _load_config(config: Path | None, verbose: bool) -> ExtractionConfig:
    if config is None:
        return ExtractionConfig.default()
    if verbose:
        click.echo(f"Loading configuration from: {config.resolve().as_posix()}")
    handler = ConfigurationHandler(config)
    return handler.load_config()


def _read_layers(dxf_file: Path, config: ExtractionConfig) -> LayerRegistry:
    click.echo(f"Reading DXF file: {dxf_file.resolve().as_posix()}")
    reader = DXFReader(dxf_file, strict=config.strict, policy=config.policy, encoding=config.encoding)
    reader.load_file()
    return reader.read_layers()


def _fail(error: Exception, verbose: bool) -> click.ClickException:
    message = f"Processing failed: {error}"
    if verbose:
        message += "\n" + traceback.format_exc()
    return click.ClickException(message)


def _print_layers(layers: LayerRegistry) -> None:
    header_line = f"{'Layer':<30} {'Color':>6} {'Line Type':>15} {'Visible':>8} {'Entities':>9}"
    header_length = len(header_line)
    click.echo(f"\nFound {len(layers)} layers:")
    click.echo("=" * header_length)
    click.echo(header_line)
    click.echo("-" * header_length)
    for layer in layers.sorted_layers():
        visible = "yes" if layer.visible else "no"
        click.echo(
            f"{layer.name:<30} {layer.color_number:>6} {layer.line_type:>15} {visible:>8} {layer.entity_count:>9}"
        )
    click.echo("-" * header_length)


def _print_extraction(result: ExtractionResult) -> None:
    click.echo(f"Processed {result.processed} entities from layer '{result.layer}'")
    click.echo(f"Created {result.valid} valid points")
    if result.skipped > 0:
        click.echo(f"Skipped {result.skipped} invalid points")
    if result.duplicates > 0:
        click.echo(f"Rejected {result.duplicates} duplicate point ids")


def _print_analysis(analysis: PointAnalysis) -> None:
    header_length = 40
    click.echo("\nPoint Analysis:")
    click.echo("=" * header_length)
    lowest, highest = analysis.lowest, analysis.highest
    click.echo(f"Lowest point (ID: {analysis.lowest_id}): {lowest.x:.2f}, {lowest.y:.2f}, {lowest.z:.2f}")
    click.echo(f"Highest point (ID: {analysis.highest_id}): {highest.x:.2f}, {highest.y:.2f}, {highest.z:.2f}")

    click.echo("\nGeometric Properties:")
    click.echo("-" * header_length)
    click.echo(f"Distance: {analysis.distance:.2f} meters")
    click.echo(f"Slope: {analysis.slope:.1f} degrees")
    if analysis.bearing is None:
        click.echo("Bearing: undefined (same horizontal position)")
    else:
        click.echo(f"Bearing: {analysis.bearing:.1f} degrees")


@click.group()
@click.version_option(package_name="dxfcloud")
def main() -> None:
    """DXF layer reader and point cloud analysis.

    This tool reads the layers and entities of ASCII DXF files and
    analyzes the 3D points stored as TEXT or POINT entities on a layer.
    """
    pass


@main.command()
@click.argument("dxf_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON configuration file",
)
@click.option("--strict", is_flag=True, default=False, help="Fail on missing SECTION/ENDSEC/ENDTAB markers.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug output.")
def layers(dxf_file: Path, config: Path | None, strict: bool, verbose: bool) -> None:
    """List the layers of a DXF file with their style and entity count.

    Arguments:
        DXF_FILE: Path to the DXF file to read
    """
    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    try:
        extraction = _load_config(config, verbose)
        if strict:
            extraction = replace(extraction, strict=True)
        registry = _read_layers(dxf_file, extraction)
    except Exception as e:
        raise _fail(e, verbose) from e
    _print_layers(registry)


@main.command()
@click.argument("dxf_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON configuration file",
)
@click.option("--layer", "-l", type=str, default=None, help="Layer to extract points from.")
@click.option(
    "--type",
    "-t",
    "entity_types",
    type=str,
    multiple=True,
    help="Entity type to decode points from (TEXT, POINT). Can be repeated.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug output.")
def points(
    dxf_file: Path,
    config: Path | None,
    layer: str | None,
    entity_types: tuple[str, ...],
    verbose: bool,
) -> None:
    """Extract the points of a layer and analyze the lowest and highest point.

    Arguments:
        DXF_FILE: Path to the DXF file to read
    """
    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    try:
        extraction = _load_config(config, verbose).with_overrides(layer=layer, entity_types=entity_types)
        registry = _read_layers(dxf_file, extraction)
    except Exception as e:
        raise _fail(e, verbose) from e

    click.echo(f"Target layer: {extraction.layer}")
    result = extract_points(registry, extraction)
    if result is None:
        raise click.ClickException(f"Layer '{extraction.layer}' not found in DXF file")
    _print_extraction(result)

    analysis = analyze_points(result.cloud)
    if analysis is None:
        click.echo("Not enough points for calculations")
        return
    _print_analysis(analysis)


@main.command()
@click.argument("config_file", type=click.Path(path_type=Path))
def create_config(config_file: Path) -> None:
    """Create a sample configuration file for point extraction.

    Arguments:
        CONFIG_FILE: Path to the JSON configuration file to write
    """
    try:
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(sample_config(), f, indent=2, ensure_ascii=False)

        click.echo(f"Sample configuration created: {config_file}")
        click.echo("Edit this file to match your DXF layer structure.")

    except OSError as e:
        raise click.ClickException(f"Cannot create configuration file: {e}") from e


if __name__ == "__main__":
    main()
