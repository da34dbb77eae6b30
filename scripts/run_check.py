#!/usr/bin/env python3
"""
CLI script to run upstream checks.

Usage:
    python run_check.py                          # Schedule recurring checks (blocking)
    python run_check.py --once                   # Run a single check cycle
    python run_check.py --repo owner/repo        # Resolve one repository
    python run_check.py --list                   # List tracked entities
"""

import argparse
import logging
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from apscheduler.schedulers.blocking import BlockingScheduler

from core.scheduler import UpstreamScheduler, DEFAULT_INITIAL_DELAY
from core.sentinel import UpstreamSentinel, check_repository, summarize
from handlers.base_handler import UpstreamError
from utils.logger import setup_logging_from_settings

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description='Upstream Sentinel - Upstream Release Checker'
    )
    parser.add_argument(
        '--config',
        type=str,
        help='Path to entities.yaml'
    )
    parser.add_argument(
        '--settings',
        type=str,
        help='Path to settings.yaml'
    )
    parser.add_argument(
        '--state',
        type=str,
        help='Path to the state JSON file'
    )
    parser.add_argument(
        '--list',
        action='store_true',
        help='List tracked entities'
    )
    parser.add_argument(
        '--repo',
        type=str,
        help='Resolve the latest version of a single owner/repo'
    )
    parser.add_argument(
        '--prerelease',
        action='store_true',
        help='Include prereleases when resolving --repo'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='Run a single check cycle and exit'
    )
    parser.add_argument(
        '--output',
        type=str,
        help='Export the --once reports to this CSV file'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    sentinel = UpstreamSentinel.from_config(args.config, args.settings, args.state)
    settings = sentinel.registry.get_settings()
    setup_logging_from_settings(settings, verbose=args.verbose)

    if args.list:
        print("\nTracked Entities:")
        print("-" * 50)
        for entity in sentinel.store.get_entities():
            upstream = entity.upstream
            print(f"  {entity.id}")
            print(f"    Name:     {entity.display_name}")
            print(f"    Upstream: {upstream.repo if upstream else 'N/A'}")
            if upstream:
                print(f"    Latest:   {upstream.latest_version or 'unknown'}")
            print()
        return 0

    if args.repo:
        token = sentinel.registry.get_upstream_settings().get('token')
        try:
            result = check_repository(args.repo, args.prerelease, token, settings)
        except (ValueError, UpstreamError) as e:
            print(f"Error: {e}")
            return 1
        print(f"{args.repo}: {result.tag}")
        print(f"  {result.url}")
        return 0

    if args.once:
        print("\nChecking all upstreams...")
        print("-" * 50)
        reports = sentinel.run_cycle()

        print("\nResults Summary:")
        print("-" * 70)
        for report in reports:
            print(report)

        if args.output:
            output_path = sentinel.export_to_csv(reports, args.output)
            print(f"\nReports exported to: {output_path}")

        counts = summarize(reports)
        print(
            f"\nSummary: {counts['updated']} updated, "
            f"{counts['unchanged']} unchanged, {counts['errors']} errors"
        )
        return 0

    upstream_settings = sentinel.registry.get_upstream_settings()
    scheduler = UpstreamScheduler(
        sentinel,
        cron=upstream_settings.get('cron'),
        initial_delay=upstream_settings.get('initial_delay', DEFAULT_INITIAL_DELAY),
        scheduler=BlockingScheduler()
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Upstream checker stopped")
    return 0


if __name__ == '__main__':
    sys.exit(main())
