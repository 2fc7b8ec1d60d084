"""CLI entrypoint for paintgraph."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import Config, load_config


@click.group()
@click.version_option(__version__, prog_name="paintgraph")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="Graph/layout settings (.toml, .yml or .yaml)",
)
@click.option("--verbose", is_flag=True, help="Log dropped records and solver progress to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """paintgraph - force-directed layouts of paintings around their painters.

    Reads a painting dataset (one CSV row per painting) and lays out a graph in
    which every painting is linked to its painter.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    if config_path is None:
        ctx.obj["config"] = Config()
        return

    try:
        ctx.obj["config"] = load_config(config_path)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--config / -c")


@cli.command()
@click.argument("dataset", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json", "rich", "svg", "html"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--steps", type=int, default=300, show_default=True, help="Maximum solver steps")
@click.option("--seed", type=int, default=None, help="Seed for the coincident-point jiggle")
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.pass_context
def layout(ctx: click.Context, dataset: Path, fmt: str, steps: int, seed: int | None, out: Path | None) -> None:
    """Lay out DATASET and render the settled frame."""
    from dataclasses import replace

    from .commands.layout_cmd import run_layout

    config: Config = ctx.obj["config"]
    if seed is not None:
        config = replace(config, layout=replace(config.layout, seed=seed))

    sys.exit(run_layout(dataset, config=config, fmt=fmt, out=out, steps=steps))


@cli.command()
@click.argument("dataset", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json", "rich"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.pass_context
def clusters(ctx: click.Context, dataset: Path, fmt: str, out: Path | None) -> None:
    """Show paintings per painter before and after capping."""
    from .commands.layout_cmd import run_clusters

    sys.exit(run_clusters(dataset, config=ctx.obj["config"], fmt=fmt, out=out))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
