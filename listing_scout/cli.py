# === FILE: listing_scout/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point for the ListingScout crawler.

Commands:
  crawl     Run a crawl from the config and print/save the records
  config    Show the effective configuration
  extract   Extract one saved property page offline (selector triage)

Global options:
  --config PATH       Path to the YAML/JSON config (default: configs/default.yaml)
  --limit INT         Request budget (overrides maxRequestsPerCrawl)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout if omitted)
  --log-format FORMAT Log format (e.g. "%(asctime)s %(levelname)s %(message)s")

crawl options:
  --json PATH         Save the records as a JSON array
  --html PATH         Save an HTML report
  --jsonl PATH        Append every record to a JSON Lines file as it is produced
  --template DIR      Directory with report.html.j2 (packaged template if omitted)
  --pretty            Indent JSON output (2 spaces)
  --crawl-timeout SEC Timeout for the whole crawl (seconds)

Also:
  --version, -v       Show the ListingScout version

Example:
  listing-scout --config configs/default.yaml --limit 20 crawl --json listings.json --pretty
"""
import sys
import asyncio
import json
from pathlib import Path

import click

from listing_scout import __version__
from listing_scout.config import load_config
from listing_scout.crawler.block_detector import BlockDetector
from listing_scout.logger import configure
from listing_scout.engine import start_crawl
from listing_scout.parser.extractor import RecordExtractor
from listing_scout.parser.html_parser import parse_document
from listing_scout.profiles import profile_for
from listing_scout.report.json_report import render_json
from listing_scout.report.html_report import render_html
from listing_scout.report.sink import JsonLinesSink

CONTEXT_SETTINGS = dict(help_option_names=["--help"])

def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)

def _quiet_stdout(ctx):
    """Keep stdout machine-readable: route logs to the log file only."""
    opts = ctx.obj['logging']
    configure(stream=False, **opts)

@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='ListingScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to the YAML/JSON configuration file.'
)
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Max requests per crawl (overrides maxRequestsPerCrawl)'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file path (stdout if omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Log format string'
)
@click.pass_context
def cli(ctx, config_path, limit, log_level, log_file, log_format):
    """ListingScout CLI command group."""
    ctx.ensure_object(dict)
    ctx.obj['logging'] = dict(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
    )
    configure(**ctx.obj['logging'])
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    if limit is not None:
        cfg = cfg.model_copy(update={'max_requests_per_crawl': limit})
    ctx.obj['config'] = cfg

@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the records as JSON'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save an HTML report'
)
@click.option(
    '--jsonl', 'jsonl_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Append records to a JSON Lines file while crawling'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with the report.html.j2 template'
)
@click.option(
    '--pretty', is_flag=True,
    help='Indent JSON output (2 spaces)'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Timeout for the whole crawl (seconds)'
)
@click.pass_context
def crawl(ctx, json_output, html_output, jsonl_output, template_dir, pretty, crawl_timeout):
    """Run the crawl and write the records."""
    cfg = ctx.obj['config']
    to_stdout = not json_output and not html_output and not jsonl_output
    if to_stdout:
        _quiet_stdout(ctx)
    else:
        click.echo(f'Starting crawl: site {cfg.site}, {len(cfg.addresses)} address(es), '
                   f'{len(cfg.start_urls)} start URL(s)')

    sink = JsonLinesSink(jsonl_output) if jsonl_output else None
    try:
        if crawl_timeout:
            report = asyncio.run(
                asyncio.wait_for(start_crawl(cfg, sink), timeout=crawl_timeout)
            )
        else:
            report = asyncio.run(start_crawl(cfg, sink))
    except asyncio.TimeoutError:
        print_error(f'Crawl did not finish within {crawl_timeout} seconds')
    except Exception as e:
        print_error(f'Crawl failed: {e}')

    # Nothing saved to a file: print the records to stdout
    if to_stdout:
        click.echo(report.json(pretty=pretty))
        return

    if jsonl_output:
        click.echo(f'JSON Lines: {jsonl_output}')

    # JSON report
    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Failed to save JSON: {e}')

    # HTML report
    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Failed to save HTML: {e}')

    summary = report.summary()
    click.echo(f"Done: {summary['succeeded']} listing(s), {summary['failed']} failure(s)")

@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    _quiet_stdout(ctx)
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2, by_alias=True))

@cli.command('extract', context_settings=CONTEXT_SETTINGS)
@click.argument('html_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--url', '-u', 'url', required=True, help='URL the page was saved from')
@click.option('--pretty', is_flag=True, help='Indent JSON output (2 spaces)')
@click.pass_context
def extract(ctx, html_file, url, pretty):
    """Extract one saved property page with the configured site profile."""
    _quiet_stdout(ctx)
    cfg = ctx.obj['config']
    try:
        profile = profile_for(cfg)
    except Exception as e:
        print_error(f'Failed to load site profile: {e}')

    doc = parse_document(html_file.read_bytes(), url=url)
    verdict = BlockDetector.from_rules(cfg.block).inspect_document(doc)
    if verdict:
        click.secho(f'Warning: page looks like a block page ({verdict.reason})', fg='yellow', err=True)

    record = RecordExtractor(profile).extract_record(doc, url)
    click.echo(json.dumps(record.to_dict(), ensure_ascii=False, indent=2 if pretty else None))
    if not record.ok:
        sys.exit(1)

if __name__ == "__main__":
    cli()
