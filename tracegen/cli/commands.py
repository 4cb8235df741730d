"""CLI commands for tracegen."""

from __future__ import annotations

import json
import logging
import sys

import click

from tracegen import __version__
from tracegen.cli.output import CLIOutput
from tracegen.config import TraceGenConfig, load_config
from tracegen.core import DepthWindow
from tracegen.errors import TraceGenError
from tracegen.observability.logging import configure_logging
from tracegen.parsing import load_dot
from tracegen.pipeline import Pipeline, discover_sources


def setup_logging(config: TraceGenConfig) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if config.verbose else logging.WARNING
    configure_logging(level=level, json_format=config.json_logs)


def _window_list(bounds: DepthWindow | tuple[int, int] | None) -> list[int] | None:
    if bounds is None:
        return None
    if isinstance(bounds, DepthWindow):
        return [bounds.minimum, bounds.maximum]
    return list(bounds)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.option("--json-logs", is_flag=True, help="Emit log records as JSON lines")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None, json_logs: bool) -> None:
    """tracegen - Enumerate label traces from DOT state graphs."""
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
    except TraceGenError as e:
        click.echo(e.format_verbose(), err=True)
        ctx.exit(2)

    if verbose:
        config_obj.verbose = True
    if json_logs:
        config_obj.json_logs = True

    ctx.obj["config"] = config_obj
    ctx.obj["verbose"] = config_obj.verbose

    setup_logging(config_obj)


@cli.command()
@click.argument("files", nargs=-1)
@click.option("--min", "min_depth", type=int, help="Smallest reported depth")
@click.option("--max", "max_depth", type=int, help="Largest expanded depth")
@click.option(
    "--include",
    "-I",
    help="Colon-separated directories searched for FILES (default from config)",
)
@click.option("--show-traces", is_flag=True, help="Print every generated trace")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_context
def generate(
    ctx: click.Context,
    files: tuple[str, ...],
    min_depth: int | None,
    max_depth: int | None,
    include: str | None,
    show_traces: bool,
    output_format: str,
) -> None:
    """Generate traces files for DOT graphs.

    Each FILE (or every matching file of a directory) produces a
    FILE.traces listing its distinct traces. Without FILES, the include
    directories are scanned.
    """
    config: TraceGenConfig = ctx.obj["config"]

    if (min_depth is None) != (max_depth is None):
        raise click.UsageError("--min and --max must be given together")
    bounds: DepthWindow | tuple[int, int] | None
    if min_depth is not None and max_depth is not None:
        bounds = (min_depth, max_depth)
    else:
        bounds = config.depth_window()

    include_paths = [p for p in include.split(":") if p] if include else config.include_paths
    show_traces = show_traces or config.show_traces

    sources = discover_sources(files, include_paths or ["."], config.file_pattern)
    if not sources:
        click.echo("No graph files found.", err=True)
        sys.exit(1)

    pipeline = Pipeline(
        depth_window=bounds,
        show_traces=show_traces,
        traces_suffix=config.traces_suffix,
    )
    results = pipeline.run(sources)
    all_ok = all(result.ok for result in results)

    if output_format == "json":
        payload = {
            "depth_window": _window_list(bounds),
            "files": [],
        }
        for result in results:
            data = result.to_dict()
            if not show_traces:
                data.pop("traces")
            payload["files"].append(data)
        click.echo(json.dumps(payload, indent=2, default=str))
    else:
        output = CLIOutput()
        if show_traces:
            for result in results:
                output.traces(result)
        output.summary(results, window=bounds)
        if all_ok:
            written = sum(1 for result in results if result.traces_path is not None)
            output.success(f"Wrote {written} traces file(s)")

    sys.exit(0 if all_ok else 1)


@cli.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
def render(file: str, output_format: str) -> None:
    """Print the adjacency listing of a DOT graph."""
    try:
        graph = load_dot(file)
    except TraceGenError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(graph.to_dict(), indent=2, default=str))
    else:
        click.echo(graph.render())


@cli.command()
def version() -> None:
    """Show the tracegen version."""
    click.echo(f"tracegen {__version__}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
