"""Command line entry point: parse a playlist, query it, write JSON or M3U."""

from __future__ import annotations
import click
import logging

from .config_manager import load_config
from .errors import M3UStreamsError
from .m3u.exporter import SUPPORTED_FORMATS, save_to_file, to_json, to_m3u
from .m3u_processor import M3UParser

logger = logging.getLogger(__name__)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("source")
@click.option("--check-live/--no-check-live", default=True, show_default=True, help="Probe each stream over HTTP")
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Write to this file instead of stdout")
@click.option("-f", "--format", "fmt", type=click.Choice(SUPPORTED_FORMATS), default="json", show_default=True,
              help="Output format (a file extension on --output takes precedence)")
@click.option("--retrieve-category", multiple=True, help="Keep streams whose category matches (repeatable)")
@click.option("--remove-category", multiple=True, help="Drop streams whose category matches (repeatable)")
@click.option("--retrieve-extension", multiple=True, help="Keep streams whose URL matches, e.g. m3u8")
@click.option("--remove-extension", multiple=True, help="Drop streams whose URL matches, e.g. mp4")
@click.option("--sort-by", "sort_key", help="Sort by key, e.g. name or tvg-id with --nested")
@click.option("--desc", is_flag=True, help="Sort in descending order")
@click.option("--nested", is_flag=True, help="Treat --sort-by as a group-member key")
@click.option("--random", "pick_random", is_flag=True, help="Output a single random stream")
@click.option("--timeout", type=float, help="Request timeout in seconds")
@click.option("--user-agent", help="User-Agent header for downloads and probes")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="JSON config file")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Logging level (default from config)")
def main(source: str, check_live: bool, output: str | None, fmt: str, retrieve_category: tuple,
         remove_category: tuple, retrieve_extension: tuple, remove_extension: tuple, sort_key: str | None,
         desc: bool, nested: bool, pick_random: bool, timeout: float | None, user_agent: str | None,
         config_path: str | None, log_level: str | None):
    """Parse the M3U playlist at SOURCE (URL or path) into stream records."""
    cfg = load_config(config_path)
    logging.basicConfig(
        level=(log_level or cfg["log_level"]).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = M3UParser(user_agent=user_agent, timeout=timeout, config=cfg)
    try:
        parser.parse_m3u(source, check_live=check_live, progress_callback=logger.debug)
        if retrieve_category:
            parser.retrieve_by_category(list(retrieve_category))
        if remove_category:
            parser.remove_by_category(list(remove_category))
        if retrieve_extension:
            parser.retrieve_by_extension(list(retrieve_extension))
        if remove_extension:
            parser.remove_by_extension(list(remove_extension))
        if sort_key:
            parser.sort_by(sort_key, asc=not desc, nested_key=nested)
        streams = parser.get_streams_info()
        if pick_random:
            streams = [parser.get_random_stream(shuffle=True)]
        if output:
            path = save_to_file(streams, output, fmt)
            click.echo(f"Saved {len(streams)} streams to {path}")
        elif fmt == "json":
            click.echo(to_json(streams))
        else:
            click.echo(to_m3u(streams), nl=False)
    except M3UStreamsError as e:
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    main()
