#!/usr/bin/env python3
"""
RssDigest - Feed to ConTeXt Document Builder
============================================

Command line entry point.

Usage:
    python main.py --help                                   # Show all commands
    python main.py check-config                             # Validate configuration
    python main.py build --feed lwn=https://lwn.net/headlines/rss \\
                         --feed xkcd=https://xkcd.com/atom.xml \\
                         --age 2 --output feeds.tex         # Build a document
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from rssdigest.config.settings import get_settings
from rssdigest.delivery.context_formatter import FeedFormatter
from rssdigest.ingestion.feed_source import FeedSource
from rssdigest.models import Feed
from rssdigest.processing.feed_parser import FeedParser
from rssdigest.utils.logging import configure_application_logging, get_logger_for_component
from rssdigest.utils.exceptions import DocumentWriteError, RssDigestError, ValidationError
from rssdigest.utils.validators import parse_feed_option

# stdout may carry the document
console = Console(stderr=True)


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, debug):
    """RssDigest - render recent feed entries as a ConTeXt document."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _setup_logging(debug: bool) -> None:
    settings = get_settings()
    configure_application_logging(
        log_level="DEBUG" if debug else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count,
    )


def _parse_feed_options(values: Tuple[str, ...]) -> List[Tuple[str, str]]:
    feeds = []
    seen = set()
    for value in values:
        try:
            key, url = parse_feed_option(value)
        except ValidationError as e:
            raise click.BadParameter(e.user_message, param_hint="--feed") from e
        if key in seen:
            raise click.BadParameter(f"Duplicate feed key '{key}'", param_hint="--feed")
        seen.add(key)
        feeds.append((key, url))
    return feeds


def fetch_feeds(feeds: List[Tuple[str, str]], age: float) -> Tuple[Dict[str, Feed], Table]:
    """Fetch feeds one after another, returning the usable ones and a status table."""
    source = FeedSource()
    results: Dict[str, Feed] = {}

    table = Table(title="Feeds")
    table.add_column("Key", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Entries", justify="right")
    table.add_column("Title")

    for key, url in feeds:
        with FeedParser(key, url, source=source) as parser:
            feed = parser.fetch(age)

        if feed is None:
            table.add_row(key, "❌ Unavailable", "-", url)
            continue

        results[key] = feed
        table.add_row(key, "✅ Fetched", str(len(feed.entries)), feed.title or feed.url)

    return results, table


@cli.command()
@click.option('--feed', '-f', 'feed_options', multiple=True, required=True,
              metavar='KEY=URL', help='Feed to include, repeatable')
@click.option('--age', '-a', type=float, default=None,
              help='Keep entries from the last AGE days (default from config)')
@click.option('--title', '-t', default=None, help='Document title (default from config)')
@click.option('--output', '-o', type=click.Path(dir_okay=False, writable=True),
              default=None, help='Write the document here instead of stdout')
@click.pass_context
def build(ctx, feed_options, age, title, output):
    """Fetch feeds and render them into one ConTeXt document."""
    feeds = _parse_feed_options(feed_options)

    try:
        settings = get_settings()
        _setup_logging(ctx.obj.get('debug', False))
        logger = get_logger_for_component('cli')

        if age is None:
            age = settings.fetch.default_age_days
        if age < 0:
            raise click.BadParameter("AGE must not be negative", param_hint="--age")

        console.print(f"[bold blue]📡 Fetching {len(feeds)} feed(s), last {age:g} day(s)[/bold blue]")
        results, table = fetch_feeds(feeds, age)
        console.print(table)

        document = FeedFormatter(results, module=settings.document.context_module).format(
            title or settings.document.default_title
        )

        if output:
            try:
                Path(output).write_text(document, encoding="utf-8")
            except OSError as e:
                raise DocumentWriteError(str(e), output_path=output) from e
            console.print(f"[bold green]✅ Wrote {output}[/bold green]")
        else:
            click.echo(document, nl=False)

        logger.info(f"Rendered {sum(len(f.entries) for f in results.values())} entries")

        if not results:
            console.print("[bold red]❌ No feed could be fetched[/bold red]")
            sys.exit(1)

    except click.ClickException:
        raise
    except RssDigestError as e:
        get_logger_for_component('cli').error(f"Build failed: {e}", extra=e.to_dict())
        console.print(f"[bold red]❌ {escape(e.user_message)}[/bold red]")
        sys.exit(1)


@cli.command()
def check_config():
    """Validate configuration from environment variables and .env."""
    console.print("[bold blue]🔧 Checking RssDigest Configuration[/bold blue]")

    try:
        settings = get_settings()
    except RssDigestError as e:
        console.print(f"[bold red]❌ Configuration error: {e}[/bold red]")
        sys.exit(1)

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    rows: List[Tuple[str, Optional[object]]] = [
        ("fetch.request_timeout", f"{settings.fetch.request_timeout}s"),
        ("fetch.user_agent", settings.fetch.user_agent),
        ("fetch.default_age_days", settings.fetch.default_age_days),
        ("document.default_title", settings.document.default_title),
        ("document.context_module", settings.document.context_module),
        ("logging.level", settings.get_effective_log_level()),
        ("logging.file_path", settings.logging.file_path or "-"),
        ("logging.rotation", f"{settings.logging.max_file_size_mb} MB x {settings.logging.backup_count}"),
    ]
    for name, value in rows:
        table.add_row(name, str(value))

    console.print(table)
    console.print("[bold green]✅ Configuration is valid[/bold green]")


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]👋 RssDigest interrupted by user[/yellow]")
        sys.exit(130)
