#!/usr/bin/env python3
"""
mvvm-services - fetch the ``services`` message from the command line.

Each trigger starts one background fetch, shows a loading line until the
services observable emits, then prints the emitted message verbatim.
"""

from __future__ import annotations

import argparse
import queue
import sys
from typing import List, Optional

from colorama import Fore, Style, init

from services_api import ServicesApiClient
from services_config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    load_config,
    parse_timeout,
    resolve_base_url,
    setup_logging,
)
from services_repository import ServicesRepository
from services_viewmodel import ServicesViewModel

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)

MAX_TIMES = 10
DEFAULT_WAIT_SECONDS = 30.0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mvvm-services',
        description='Fetch the services message and print it',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mvvm-services                                   # use config.json / SERVICES_BASE_URL
  mvvm-services --base-url https://api.example.com/v1/
  mvvm-services --times 3 --log-level DEBUG       # three sequential fetches
        """
    )
    parser.add_argument(
        '--config', '-c',
        default=DEFAULT_CONFIG_PATH,
        help='Path to config file (default: config.json)'
    )
    parser.add_argument(
        '--base-url',
        help='Base URL of the API (overrides config and SERVICES_BASE_URL)'
    )
    parser.add_argument(
        '--log-level',
        help='Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)'
    )
    parser.add_argument(
        '--timeout',
        help='HTTP request timeout in seconds (default: none)'
    )
    parser.add_argument(
        '--times', '-n',
        type=int,
        default=1,
        metavar='N',
        help=f'Number of sequential fetches (default: 1, max: {MAX_TIMES})'
    )
    parser.add_argument(
        '--wait',
        type=float,
        default=DEFAULT_WAIT_SECONDS,
        metavar='SECONDS',
        help='How long to wait for each result (default: 30)'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    if args.times < 1 or args.times > MAX_TIMES:
        print(f"{Fore.RED}Error: --times must be between 1 and {MAX_TIMES}")
        return 2
    if args.wait <= 0:
        print(f"{Fore.RED}Error: --wait must be positive")
        return 2

    try:
        config = load_config(args.config)
        setup_logging(args.log_level or config['log_level'])
        base_url = resolve_base_url(config, args.base_url)
        timeout = parse_timeout(args.timeout, name='--timeout') if args.timeout else config['api_timeout_seconds']
        client = ServicesApiClient(base_url, timeout=timeout)
    except (ConfigError, ValueError) as e:
        print(f"{Fore.RED}Error: {e}")
        return 2

    viewmodel = ServicesViewModel(ServicesRepository(client))
    emissions: "queue.Queue" = queue.Queue()
    unsubscribe = viewmodel.services.observe(emissions.put)

    result = None
    try:
        for _ in range(args.times):
            print(f"{Fore.CYAN}Loading...")
            viewmodel.get_services()
            try:
                result = emissions.get(timeout=args.wait)
            except queue.Empty:
                print(f"{Fore.YELLOW}No response after {args.wait:g} seconds")
                return 1
            print(f"{Style.RESET_ALL}{result.message}")
    finally:
        unsubscribe()

    return 0 if result is not None and result.ok else 1


if __name__ == '__main__':
    sys.exit(main())
