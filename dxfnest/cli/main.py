"""Main CLI entry point for dxfnest."""

import click

from dxfnest import __version__
from dxfnest.utils import console


@click.group()
@click.version_option(version=__version__, prog_name="dxfnest")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """dxfnest - pack DXF outlines onto a sheet.

    Reads LINE and LWPOLYLINE entities, places them largest first with a
    rotation and grid search, and writes the nested drawing back to DXF.
    """
    from dxfnest.config import get_settings
    from dxfnest.utils import setup_logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging("DEBUG" if verbose else get_settings().log_level.upper())


# Import and register commands
from dxfnest.cli.nest_cmd import inspect, nest

cli.add_command(nest)
cli.add_command(inspect)


@cli.command()
def status() -> None:
    """Show the effective configuration."""
    from dxfnest.config import get_settings

    settings = get_settings()

    console.print("[bold]dxfnest Status[/bold]")
    console.print(f"Version: {__version__}")
    console.print()
    console.print("[bold]Sheet:[/bold]")
    console.print(f"  Size: {settings.sheet_width:g} x {settings.sheet_height:g}")
    console.print()
    console.print("[bold]Search:[/bold]")
    console.print(f"  Rotation step: {settings.rotation_step:g}°")
    console.print(f"  Translation step: {settings.translation_step:g}")
    console.print(f"  Overlap test: {settings.overlap_mode}")
    console.print()
    console.print("[bold]Output:[/bold]")
    console.print(f"  Directory: {settings.output_dir}")
    console.print(f"  Entity order: {settings.export_order}")


if __name__ == "__main__":
    cli()
