"""CLI interface for Monotone.

Command-line tool for serving and inspecting the tutorial set.
"""

import asyncio
import logging
from pathlib import Path

import click

from monotone.config import Config
from monotone.core.errors import ContentError
from monotone.core.index import TutorialIndex
from monotone.core.renderer import renderer
from monotone.core.resolver import HttpContentResolver, parse_tutorial_id


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover monotone.toml)",
)
@click.option(
    "--source-dir",
    "-s",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Tutorial source directory (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, source_dir: Path | None, verbose: bool) -> None:
    """Monotone - miscellaneous tutorials."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    ctx.obj = config.with_overrides(source_dir=source_dir)


@cli.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--base-url",
    default=None,
    help="Fetch tutorial content from this URL instead of the source directory",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: disabled)",
)
@click.pass_obj
def serve(
    config: Config,
    host: str | None,
    port: int | None,
    base_url: str | None,
    live_reload: bool | None,
) -> None:
    """Start the tutorial server."""
    from monotone.server import run_server

    config = config.with_overrides(
        host=host,
        port=port,
        base_url=base_url,
        live_reload_enabled=live_reload,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    if config.content.base_url:
        click.echo(f"Content URL: {config.content.base_url}")
    else:
        click.echo(f"Source directory: {config.content.source_dir}")
    click.echo(f"Index file: {config.content.index_file}")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    run_server(config)


@cli.command("list")
@click.pass_obj
def list_tutorials(config: Config) -> None:
    """List indexed tutorials in display order."""
    try:
        index = TutorialIndex.load(config.content.index_file)
    except ValueError as e:
        raise click.ClickException(f"Invalid tutorial index: {e}") from e

    if not len(index):
        click.echo("No tutorials indexed.")
        return

    for entry in index.list():
        click.echo(f"{entry.id:>4}  {entry.title}")
        if entry.description:
            click.echo(f"      {entry.description}")
        click.echo(f"      Created: {entry.created_at.isoformat()}")


@cli.command()
@click.argument("tutorial_id")
@click.pass_obj
def show(config: Config, tutorial_id: str) -> None:
    """Render a tutorial to HTML on stdout."""
    from monotone.server import create_resolver

    async def _render() -> str:
        resolver = create_resolver(config)
        try:
            markdown_text = await resolver.resolve(parse_tutorial_id(tutorial_id))
        finally:
            if isinstance(resolver, HttpContentResolver):
                await resolver.aclose()
        return renderer.render(markdown_text)

    try:
        html = asyncio.run(_render())
    except ContentError as e:
        raise click.ClickException(str(e)) from e

    click.echo(html, nl=False)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
