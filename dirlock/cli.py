#!/usr/bin/env python3

"""
Command-line interface for dirlock
"""

import argparse
import logging
import os
import sys
import time

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from tqdm import tqdm

from .config import Config
from .errors import DataDirInUseError, DirLockError
from .guard import DataDirGuard, probe
from .lock import LOCKING_SUPPORTED
from .utils import resolve_lock_path

logger = logging.getLogger(__name__)

console = Console()

EXIT_OK = 0
EXIT_LOCKED = 1
EXIT_ERROR = 2
EXIT_INTERRUPTED = 130


def configure_logging(level: str):
    """Configure root logging for the CLI"""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='dirlock', description='Data directory lock tool')
    parser.add_argument('--lock-name', help='Lock file name inside the data directory (default: LOCK)')
    parser.add_argument('--no-create', dest='create', action='store_false', default=None,
                        help='Do not create the data directory if it is missing')
    parser.add_argument('--log-level', help='Logging level (e.g., INFO, DEBUG)')

    subparsers = parser.add_subparsers(dest='command', required=True)

    status = subparsers.add_parser('status',
                                   help='Show whether a data directory is locked (briefly takes a free lock while checking)')
    status.add_argument('datadir', help='Data directory path')

    hold = subparsers.add_parser('hold', help='Lock a data directory for a while, then release it')
    hold.add_argument('datadir', help='Data directory path')
    hold.add_argument('--seconds', type=int, default=10, help='How long to hold the lock (default: 10)')

    return parser


def cmd_status(config: dict, datadir: str) -> int:
    """print lock status of a data directory"""
    lock_path = resolve_lock_path(datadir, config['lock_name'])
    if not os.path.exists(lock_path):
        state, style, code = 'absent', 'yellow', EXIT_OK
    elif probe(datadir, config['lock_name']):
        state, style, code = 'locked', 'red', EXIT_LOCKED
    else:
        state, style, code = 'free', 'green', EXIT_OK

    table = Table(box=box.ROUNDED, show_header=False, border_style="bright_blue")
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("data directory", os.path.dirname(lock_path))
    table.add_row("lock file", lock_path)
    table.add_row("locking supported", "yes" if LOCKING_SUPPORTED else "[yellow]no, lock is not enforced[/yellow]")
    table.add_row("state", f"[{style}]{state}[/{style}]")

    panel = Panel(
        table,
        title="[bold cyan]lock status[/bold cyan]",
        border_style="bright_blue",
        padding=(1, 2)
    )

    console.print(panel)
    return code


def cmd_hold(config: dict, datadir: str, seconds: int) -> int:
    """hold the data directory lock for a number of seconds"""
    if seconds < 0:
        console.print("[bold red]--seconds must not be negative[/bold red]")
        return EXIT_ERROR

    guard = DataDirGuard(datadir, lock_name=config['lock_name'], create=config['create'])
    try:
        guard.open()
    except DataDirInUseError as e:
        console.print(f"[bold red]{e}[/bold red]")
        return EXIT_LOCKED

    try:
        console.print(f"[bold cyan]holding {guard.lock_path}[/bold cyan]")
        with tqdm(
            total=seconds,
            desc="holding lock",
            unit="s",
            bar_format="{desc:<30} |{bar:50}| {n_fmt}/{total_fmt}s [{elapsed}<{remaining}]",
            colour="green",
            ncols=120,
            leave=True
        ) as pbar:
            for _ in range(seconds):
                time.sleep(1)
                pbar.update(1)
    except KeyboardInterrupt:
        console.print("[yellow]interrupted, releasing lock[/yellow]")
        return EXIT_INTERRUPTED
    finally:
        guard.close()

    console.print("[bold green]lock released[/bold green]")
    return EXIT_OK


def main(argv=None) -> int:
    """main"""
    parser = build_parser()
    args = parser.parse_args(argv)

    file_config = Config.load_config(args.datadir)
    config = Config.merge_config(file_config, vars(args))
    configure_logging(config['log_level'])

    try:
        if args.command == 'status':
            return cmd_status(config, args.datadir)
        if args.command == 'hold':
            return cmd_hold(config, args.datadir, args.seconds)
    except (DirLockError, ValueError) as e:
        logger.error(str(e))
        console.print(f"[bold red]dirlock failed: {e}[/bold red]")
        return EXIT_ERROR

    parser.error(f"Unknown command: {args.command}")
    return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
