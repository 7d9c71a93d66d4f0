"""GroupHunt CLI - scan, proxy list generation and result browsing"""

import asyncio
import logging
import sys
from typing import List, Optional

import click
from rich.console import Console

from .. import __version__
from ..main import setup_logging
from ..scan_core.config import ConfigManager, ScanConfig, create_cli_overrides, read_api_key
from ..scan_core.constants import GROUP_PAGE_URL
from ..scan_core.exceptions import GroupHuntError, ConfigurationError, ProxyListNotFoundError
from ..scan_core.models import Hit
from ..scan_core.proxy_list import load_proxy_list, generate_proxy_list
from ..scan_core.result_store import ResultStore
from ..scan_engine.engine import ScanEngine, build_engine
from .monitor import ScanMonitor, MonitoringStats, hits_table

logger = logging.getLogger(__name__)

console = Console()

FIRST_RUN_HINT = (
    "Thank you for using GroupHunt.\n"
    "To scrape groups, you must first create a list of proxies to scrape with.\n"
    "Run `grouphunt generate-proxies` to automatically generate one.\n"
    "You will also need an api.key file in the working directory."
)


# ===============================================================================
# OUTPUT HELPERS
# ===============================================================================

def print_success(message: str):
    console.print(f"[green]✅ {message}[/green]")


def print_error(message: str):
    console.print(f"[red]❌ {message}[/red]")


def print_warning(message: str):
    console.print(f"[yellow]⚠️  {message}[/yellow]")


def load_cli_config(ctx: click.Context, **overrides) -> ScanConfig:
    """Build the effective configuration for a command"""
    manager = ConfigManager(ctx.obj.get('config_path'), create_cli_overrides(**overrides))
    errors = manager.validate()
    if errors:
        raise ConfigurationError("Invalid configuration: " + "; ".join(errors))
    return manager.config


# ===============================================================================
# SCAN RUNNER
# ===============================================================================

async def _stop_after(engine: ScanEngine, seconds: float, grace: float):
    await asyncio.sleep(seconds)
    logger.info(f"Scan duration of {seconds}s reached")
    await engine.stop(grace)


async def run_scan(config: ScanConfig, proxies: List[str], api_key: Optional[str] = None,
                   duration: Optional[float] = None, monitor: Optional[ScanMonitor] = None,
                   engine: Optional[ScanEngine] = None) -> MonitoringStats:
    """Run the engine until it stops, the duration elapses or we are cancelled"""
    engine = engine or build_engine(config, proxies, api_key)
    monitor = monitor or ScanMonitor(proxies, console=console)
    engine.start()
    stopper = None
    if duration:
        stopper = asyncio.create_task(_stop_after(engine, duration, config.stop_grace_seconds))
    try:
        await monitor.consume(engine)
    finally:
        if stopper is not None and not stopper.done():
            stopper.cancel()
        if engine.is_running:
            await engine.stop(config.stop_grace_seconds)
    return monitor.stats


# ===============================================================================
# COMMANDS
# ===============================================================================

@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.version_option(version=__version__, prog_name="grouphunt")
@click.option('-c', '--config', 'config_path', type=click.Path(dir_okay=False),
              help='Configuration file (default: ~/.grouphunt/config.yaml)')
@click.option('-V', '--verbose', is_flag=True, help='Verbose output (DEBUG level)')
@click.option('-q', '--quiet', is_flag=True, help='Quiet mode (WARNING level)')
@click.option('-N', '--silent', is_flag=True, help='Silent mode (ERROR level)')
@click.pass_context
def main_cli(ctx, config_path, verbose, quiet, silent):
    """Scan random groups for claimable funds through a pool of proxies."""
    ctx.ensure_object(dict)
    ctx.obj.update(config_path=config_path, verbose=verbose, quiet=quiet, silent=silent)
    try:
        config = load_cli_config(ctx, verbose=verbose, quiet=quiet, silent=silent)
    except ConfigurationError as e:
        print_error(str(e))
        ctx.exit(1)
    setup_logging(config.log_level, config.log_file if config.enable_file_logging else None)


@main_cli.command()
@click.option('-p', '--proxies', 'proxies_file', help='JSON file with proxy URIs')
@click.option('-o', '--output', 'results_file', help='Result file for found groups')
@click.option('-m', '--minimum', type=click.IntRange(min=0), help='Minimum robux before the ownership check')
@click.option('--premium/--no-premium', default=None, help='Accept Builders Club only groups')
@click.option('-d', '--duration', type=float, help='Stop scanning after N seconds')
@click.pass_context
def scan(ctx, proxies_file, results_file, minimum, premium, duration):
    """Scan groups with one worker per proxy."""
    try:
        config = load_cli_config(ctx, verbose=ctx.obj['verbose'], quiet=ctx.obj['quiet'],
                                 silent=ctx.obj['silent'], proxies_file=proxies_file,
                                 results_file=results_file, minimum=minimum, premium=premium)
        proxies = load_proxy_list(config.proxies_file)
    except ProxyListNotFoundError:
        console.print(FIRST_RUN_HINT)
        ctx.exit(1)
    except GroupHuntError as e:
        print_error(str(e))
        ctx.exit(1)

    if not proxies:
        print_warning(f"{config.proxies_file} contains no proxies")
        ctx.exit(1)

    try:
        api_key = read_api_key(config.api_key_file)
    except ConfigurationError as e:
        print_error(str(e))
        ctx.exit(1)

    stats = None
    try:
        stats = asyncio.run(run_scan(config, proxies, api_key, duration))
    except KeyboardInterrupt:
        print_warning("Interrupted, workers stopped")

    if stats is not None:
        print_success(f"{stats.groups_checked} groups checked, {len(stats.hits)} groups found "
                      f"({stats.robux_found} robux). Results in {config.results_file}")


@main_cli.command('generate-proxies')
@click.option('-p', '--proxies', 'proxies_file', help='Where to save the proxy list')
@click.option('--url', help='Proxy list source URL')
@click.pass_context
def generate_proxies(ctx, proxies_file, url):
    """Download a fresh SOCKS5 proxy list."""
    try:
        config = load_cli_config(ctx, proxies_file=proxies_file)
        proxies = generate_proxy_list(config.proxies_file, url or config.proxy_source_url)
    except GroupHuntError as e:
        print_error(str(e))
        ctx.exit(1)
    print_success(f"Saved {len(proxies)} proxies to {config.proxies_file}")


@main_cli.command()
@click.option('-o', '--output', 'results_file', help='Result file to read')
@click.option('-n', '--limit', type=click.IntRange(min=1), default=50, show_default=True,
              help='Number of groups to show')
@click.pass_context
def results(ctx, results_file, limit):
    """Show the groups recorded so far."""
    try:
        config = load_cli_config(ctx, results_file=results_file)
    except GroupHuntError as e:
        print_error(str(e))
        ctx.exit(1)

    entries = ResultStore(config.results_file).entries()
    if not entries:
        print_warning(f"No groups recorded in {config.results_file}")
        return
    hits = [Hit(group_id, balance) for group_id, balance in entries[:limit]]
    console.print(hits_table(hits, title=f"Groups found ({len(entries)})"))


@main_cli.command('open')
@click.argument('group_id', type=click.IntRange(min=0))
def open_group(group_id):
    """Open a group page in the browser."""
    url = GROUP_PAGE_URL.format(group_id=group_id)
    if click.launch(url) != 0:
        print_error(f"Could not open link: {url}")
        sys.exit(1)
