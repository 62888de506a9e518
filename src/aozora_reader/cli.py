"""Click CLI for the Aozora reader.

Commands:
    convert    Full Aozora text → .docx conversion
    inspect    Parse a text file to ParsedDocument JSON (for debugging)
    from-json  Generate .docx from a saved ParsedDocument JSON file
    detect     Report the detected encoding of a file
    toc        Print the heading outline of a text file
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from aozora_reader.config import Config
from aozora_reader.exceptions import AozoraReaderError
from aozora_reader.ir.toc import flatten_tree
from aozora_reader.pipeline import Pipeline


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to a YAML configuration file.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """Aozora Bunko text reader and Word converter."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = Config.load(config_path)
    except AozoraReaderError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)
    if verbose:
        config.verbose = True

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["pipeline"] = Pipeline(config)


@main.command()
@click.argument("input_txt", type=click.Path(exists=True, path_type=Path))
@click.argument("output_docx", type=click.Path(path_type=Path), required=False)
@click.option("--save-json", is_flag=True, help="Save ParsedDocument JSON alongside output.")
@click.option(
    "--json-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Custom path for the JSON file.",
)
@click.option("--report", is_flag=True, help="Save parse report JSON alongside output.")
@click.option(
    "--report-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Custom path for the report JSON file.",
)
@click.pass_context
def convert(
    ctx: click.Context,
    input_txt: Path,
    output_docx: Path | None,
    save_json: bool,
    json_path: Path | None,
    report: bool,
    report_path: Path | None,
) -> None:
    """Convert an Aozora Bunko text file to a Word document."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    if output_docx is None:
        output_docx = input_txt.with_suffix(".docx")

    try:
        result = pipeline.convert(
            input_txt,
            output_docx,
            save_json=save_json,
            json_path=json_path,
            save_report=report,
            report_path=report_path,
        )
        click.echo(f"Generated: {result}")

        if report and pipeline.last_report:
            rpt = pipeline.last_report
            click.echo(
                f"Report: {rpt.heading_count} headings, "
                f"{rpt.ruby_count} ruby, {rpt.image_count} images, "
                f"{len(rpt.warnings)} warnings"
            )
    except AozoraReaderError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("input_txt", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def inspect(ctx: click.Context, input_txt: Path) -> None:
    """Parse a text file and output the ParsedDocument as JSON."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        click.echo(pipeline.inspect(input_txt))
    except AozoraReaderError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)


@main.command("from-json")
@click.argument("document_json", type=click.Path(exists=True, path_type=Path))
@click.argument("output_docx", type=click.Path(path_type=Path))
@click.pass_context
def from_json(ctx: click.Context, document_json: Path, output_docx: Path) -> None:
    """Generate a Word document from a saved ParsedDocument JSON file."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        result = pipeline.from_json(document_json, output_docx)
        click.echo(f"Generated: {result}")
    except AozoraReaderError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("input_txt", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def detect(ctx: click.Context, input_txt: Path) -> None:
    """Detect the character encoding of a text file."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        _, result = pipeline.load(input_txt)
    except AozoraReaderError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    click.echo(f"Encoding:   {result.encoding.value}")
    click.echo(f"Confidence: {result.confidence:.2f}")
    click.echo(f"Valid:      {'yes' if result.is_valid else 'no'}")
    click.echo(f"BOM:        {'yes' if result.has_bom else 'no'}")


@main.command()
@click.argument("input_txt", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def toc(ctx: click.Context, input_txt: Path) -> None:
    """Print the heading outline of a text file."""
    pipeline: Pipeline = ctx.obj["pipeline"]

    try:
        parsed = pipeline.parse_file(input_txt)
    except AozoraReaderError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    nodes = flatten_tree(parsed.table_of_contents())
    if not nodes:
        click.echo("(no headings)")
        return
    for node in nodes:
        click.echo(f"{'  ' * (node.level - 1)}{node.heading.text}")
