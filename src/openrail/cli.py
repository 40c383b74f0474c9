"""
Command-line interface for OpenRail.

Provides commands for inspecting rail and sampler configurations and the
size of the rail grid a sampler will search.
"""

from pathlib import Path

import click
import numpy as np
from rich.console import Console
from rich.table import Table

from openrail import __version__
from openrail.core.config import ConfigManager
from openrail.core.exceptions import OpenRailError
from openrail.core.logging import configure_logging
from openrail.motion.external_axes import build_rail_grid, rail_grid_size
from openrail.motion.sampler import search_passes, search_workload
from openrail.motion.tool_pose import make_z_axis_tool_pose_sampler

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config-dir",
    type=click.Path(path_type=Path),
    default="config",
    help="Configuration directory",
)
@click.option("--log-level", default="WARNING", help="Minimum log level")
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines")
@click.pass_context
def main(ctx: click.Context, config_dir: Path, log_level: str, json_logs: bool) -> None:
    """OpenRail - Candidate configurations for rail-mounted robots."""
    configure_logging(level=log_level, json_output=json_logs)
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir


def _load_config(ctx: click.Context) -> ConfigManager:
    config_mgr = ConfigManager(ctx.obj["config_dir"])
    config_mgr.load()
    return config_mgr


# =============================================================================
# Configuration Commands
# =============================================================================


@main.command("rails")
@click.pass_context
def list_rails(ctx: click.Context) -> None:
    """List available rail configurations."""
    try:
        config_mgr = _load_config(ctx)
        rails = config_mgr.list_rails()

        if not rails:
            console.print("[yellow]No rail configurations found.[/yellow]")
            return

        table = Table(title="Available Rails")
        table.add_column("Name", style="cyan")
        table.add_column("Base Link")
        table.add_column("Axes")

        for name in rails:
            rail = config_mgr.get_rail(name)
            axes = ", ".join(f"{axis.name} ({axis.type})" for axis in rail.axes)
            table.add_row(name, rail.base_link, axes)

        console.print(table)

    except OpenRailError as e:
        console.print(f"[red]✗[/red] Failed to list rails: {e}")
        raise SystemExit(1)


@main.command("samplers")
@click.pass_context
def list_samplers(ctx: click.Context) -> None:
    """List available sampler configurations."""
    try:
        config_mgr = _load_config(ctx)
        samplers = config_mgr.list_samplers()

        if not samplers:
            console.print("[yellow]No sampler configurations found.[/yellow]")
            return

        table = Table(title="Available Samplers")
        table.add_column("Name", style="cyan")
        table.add_column("Resolution")
        table.add_column("Reach")
        table.add_column("Allow Collision")
        table.add_column("Budget")

        for name in samplers:
            sampler = config_mgr.get_sampler(name)
            table.add_row(
                name,
                ", ".join(f"{step:g}" for step in sampler.rail_sample_resolution),
                f"{sampler.robot_reach:g}",
                "✓" if sampler.allow_collision else "-",
                str(sampler.max_grid_points or "-"),
            )

        console.print(table)

    except OpenRailError as e:
        console.print(f"[red]✗[/red] Failed to list samplers: {e}")
        raise SystemExit(1)


# =============================================================================
# Grid Commands
# =============================================================================


@main.command("grid")
@click.argument("rail_name")
@click.argument("sampler_name")
@click.pass_context
def show_grid(ctx: click.Context, rail_name: str, sampler_name: str) -> None:
    """Show the rail grid and IK workload of a rail/sampler pair."""
    try:
        config_mgr = _load_config(ctx)
        rail = config_mgr.get_rail(rail_name)
        sampler = config_mgr.get_sampler(sampler_name)

        limits = [[axis.min_limit, axis.max_limit] for axis in rail.axes]
        grid = build_rail_grid(limits, sampler.rail_sample_resolution)

        if sampler.tool_pose_resolution is not None:
            tool_poses = len(make_z_axis_tool_pose_sampler(sampler.tool_pose_resolution)(np.eye(4)))
        else:
            tool_poses = 1

    except OpenRailError as e:
        console.print(f"[red]✗[/red] Failed to build rail grid: {e}")
        raise SystemExit(1)

    table = Table(title=f"Rail Grid: {rail_name} / {sampler_name}")
    table.add_column("Axis", style="cyan")
    table.add_column("Type")
    table.add_column("Low")
    table.add_column("High")
    table.add_column("Resolution")
    table.add_column("Samples")

    for axis, step, samples in zip(rail.axes, sampler.rail_sample_resolution, grid):
        table.add_row(
            axis.name,
            axis.type,
            f"{axis.min_limit:g}",
            f"{axis.max_limit:g}",
            f"{step:g}",
            str(len(samples)),
        )

    console.print(table)

    grid_points = rail_grid_size(grid)
    passes = search_passes(sampler.allow_collision)
    workload = search_workload(grid_points, tool_poses, sampler.allow_collision)
    console.print(f"  Grid points: {grid_points}")
    console.print(f"  Tool poses:  {tool_poses}")
    console.print(f"  Passes:      {passes}")
    console.print(f"  IK workload: {workload}")

    if sampler.max_grid_points is not None and workload > sampler.max_grid_points:
        console.print(
            f"[red]✗[/red] Workload exceeds budget of {sampler.max_grid_points}"
        )
        raise SystemExit(1)


if __name__ == "__main__":
    main()
