"""CLI commands for nesting DXF drawings."""

import json
from pathlib import Path
from typing import Optional

import click
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from dxfnest.utils import console, log_console


def _pick(value, default):
    return default if value is None else value


def _load(input_path: str):
    """Read outlines, exiting with status 1 on a bad drawing."""
    from dxfnest.dxf import DrawingParseError, read_outlines
    from dxfnest.nesting import DegenerateOutlineError

    try:
        return read_outlines(input_path)
    except (DrawingParseError, DegenerateOutlineError) as e:
        log_console.print(f"[red]Could not read {Path(input_path).name}: {escape(str(e))}[/red]")
        raise SystemExit(1)


@click.command("nest")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Nested DXF output (default: <output_dir>/<name>_nested.dxf)")
@click.option("--preview", "-p", type=click.Path(dir_okay=False), default=None,
              help="Write a PNG preview of the sheet")
@click.option("--sheet-width", "-W", type=float, default=None, help="Sheet width")
@click.option("--sheet-height", "-H", type=float, default=None, help="Sheet height")
@click.option("--rotation-step", "-r", type=float, default=None, help="Rotation step in degrees")
@click.option("--translation-step", "-t", type=float, default=None, help="Grid step")
@click.option("--overlap", type=click.Choice(["bbox", "sat"]), default=None,
              help="Overlap test (bbox: fast, sat: exact for convex shapes)")
@click.option("--order", type=click.Choice(["source", "placement"]), default=None,
              help="Entity order of the output drawing")
@click.option("--strict", is_flag=True, help="Exit with status 2 if any outline is unplaceable")
@click.option("--json", "as_json", is_flag=True, help="Output result as JSON")
def nest(
    input_path: str,
    output: Optional[str],
    preview: Optional[str],
    sheet_width: Optional[float],
    sheet_height: Optional[float],
    rotation_step: Optional[float],
    translation_step: Optional[float],
    overlap: Optional[str],
    order: Optional[str],
    strict: bool,
    as_json: bool,
) -> None:
    """Nest the LINE and LWPOLYLINE entities of a DXF drawing onto a sheet.

    Example: dxfnest nest parts.dxf -W 1200 -H 800 -o nested.dxf --preview nested.png
    """
    from dxfnest.config import get_settings
    from dxfnest.dxf import DXFWriter
    from dxfnest.nesting import NestingConfig, NestingEngine, NestingJob
    from dxfnest.render import save_preview

    settings = get_settings()
    try:
        config = NestingConfig(
            sheet_width=_pick(sheet_width, settings.sheet_width),
            sheet_height=_pick(sheet_height, settings.sheet_height),
            rotation_step=_pick(rotation_step, settings.rotation_step),
            translation_step=_pick(translation_step, settings.translation_step),
            overlap_mode=overlap or settings.overlap_mode,
            export_order=order or settings.export_order,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))

    outlines = _load(input_path)
    if not outlines:
        console.print("[yellow]No LINE or LWPOLYLINE entities found[/yellow]")
        return

    if output is None:
        output = str(Path(settings.output_dir) / f"{Path(input_path).stem}_nested.dxf")

    job = NestingJob(outlines=outlines, config=config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        disable=as_json,
    ) as progress:
        task = progress.add_task("Nesting outlines...", total=len(outlines))

        def on_progress(index, total, outline, placed):
            progress.update(task, advance=1, description=f"Nesting {outline.label}")

        engine = NestingEngine(config, on_progress=on_progress)
        engine.run(job)

    result = job.result
    out_path = DXFWriter().save_result(result, output, config.export_order)
    preview_path = None
    if preview:
        preview_path = save_preview(result, preview, scale=settings.preview_scale)

    if as_json:
        data = result.to_dict()
        data["output"] = str(out_path)
        data["preview"] = str(preview_path) if preview_path else None
        click.echo(json.dumps(data, indent=2))
    else:
        _print_summary(result, out_path, preview_path)

    if strict and result.unplaced:
        raise SystemExit(2)


def _print_summary(result, out_path: Path, preview_path: Optional[Path]) -> None:
    from dxfnest.utils import format_duration

    table = Table(title=f"Nesting on {result.sheet.width:g} x {result.sheet.height:g}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_row("Placed", str(len(result.placed)))
    table.add_row("Unplaced", str(len(result.unplaced)))
    table.add_row("Utilization", f"{result.utilization:.1f}%")
    table.add_row("Time", format_duration(result.processing_time))
    console.print(table)

    if result.unplaced:
        console.print(f"\n[bold yellow]Unplaceable outlines ({len(result.unplaced)}):[/bold yellow]")
        for item in result.unplaced:
            console.print(f"  [yellow]•[/yellow] {item.outline.label} ({item.reason.value})")

    console.print(f"\n[green]Saved:[/green] {out_path}")
    if preview_path:
        console.print(f"[green]Preview:[/green] {preview_path}")


@click.command("inspect")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def inspect(input_path: str, as_json: bool) -> None:
    """List the outlines read from a DXF drawing."""
    from dxfnest.nesting import bounding_box

    outlines = _load(input_path)

    if as_json:
        click.echo(json.dumps([o.to_dict() for o in outlines], indent=2))
        return

    table = Table(title=f"Outlines in {Path(input_path).name}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Layer")
    table.add_column("Points", justify="right")
    table.add_column("Size", justify="right", style="green")

    for outline in outlines:
        box = bounding_box(outline)
        table.add_row(
            str(outline.source_index),
            outline.kind,
            outline.layer,
            str(len(outline.points)),
            f"{box.width:.1f} x {box.height:.1f}",
        )

    console.print(table)
