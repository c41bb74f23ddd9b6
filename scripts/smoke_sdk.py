#!/usr/bin/env python3
"""Exercise the Repo Pulse SDK against the live GitHub API and local sensors."""

import argparse
import asyncio
import json
import logging
import os
import sys

from repo_pulse import RepoPulse, __version__
from repo_pulse.output.json_writer import build_report


def setup_logging(verbose: bool = False, debug: bool = False):
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def check_summary(pulse: RepoPulse, link_header: bool):
    print(f"\n{'='*50}")
    print(f"Fetching summary for {pulse.repository} (link_header={link_header})")
    print("=" * 50)

    summary = await pulse.fetch_repo_summary()
    print(f"Commits: {summary.commit_count}")
    print(f"Closed PRs: {summary.closed_pr_count}")
    print(f"Branches: {summary.branch_count}")
    print(f"Contributors: {summary.contributor_count}")
    for contributor in summary.contributors[:5]:
        print(f"  - {contributor.login}: {contributor.contributions}")
    for resource, message in summary.errors.items():
        print(f"! {resource}: {message}")
    return summary


async def check_clock(pulse: RepoPulse, seconds: float):
    print(f"\n{'='*50}")
    print(f"Running clock for {seconds:g}s")
    print("=" * 50)

    pulse.start_clock(on_tick=print)
    await asyncio.sleep(seconds)
    pulse.stop_clock()


async def check_battery(pulse: RepoPulse, seconds: float):
    print(f"\n{'='*50}")
    print(f"Watching battery for {seconds:g}s")
    print("=" * 50)

    status = pulse.fetch_battery_info()
    print(f"Now: {status.percent}% {status.description} ({status.color.value})")

    pulse.start_battery_monitoring(
        lambda s: print(f"Changed: {s.percent}% {s.description} ({s.color.value})")
    )
    await asyncio.sleep(seconds)
    pulse.stop_battery_monitoring()


async def main():
    parser = argparse.ArgumentParser(
        description="Exercise the Repo Pulse SDK locally",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/smoke_sdk.py octocat/Hello-World
  python scripts/smoke_sdk.py octocat/Hello-World --all --seconds 3
  python scripts/smoke_sdk.py octocat/Hello-World --link-header --output report.json
""",
    )
    parser.add_argument("repository", help="Repository as OWNER/NAME")
    parser.add_argument(
        "--token",
        help="GitHub token (default: REPO_PULSE_TOKEN or GITHUB_TOKEN env var)",
    )
    parser.add_argument("--link-header", action="store_true", help="Stop on missing rel=next")
    parser.add_argument("--clock", action="store_true", help="Run the clock")
    parser.add_argument("--battery", action="store_true", help="Watch the battery")
    parser.add_argument("--all", action="store_true", help="Summary, clock and battery")
    parser.add_argument("--seconds", type=float, default=3.0, help="Clock/battery run time")
    parser.add_argument("--output", "-o", help="Save the summary report to JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument("--version", action="version", version=f"repo-pulse {__version__}")

    args = parser.parse_args()

    setup_logging(verbose=args.verbose, debug=args.debug)

    token = args.token or os.getenv("REPO_PULSE_TOKEN") or os.getenv("GITHUB_TOKEN")

    print(f"Repo Pulse SDK v{__version__}")
    print(f"Authenticated: {'Yes' if token else 'No'}")

    async with RepoPulse(
        args.repository, token=token, follow_link_header=args.link_header
    ) as pulse:
        try:
            summary = await check_summary(pulse, args.link_header)

            if args.output:
                with open(args.output, "w") as f:
                    json.dump(build_report(summary), f, indent=2, default=str)
                print(f"\nReport saved to: {args.output}")

            if args.all or args.clock:
                await check_clock(pulse, args.seconds)

            if args.all or args.battery:
                await check_battery(pulse, args.seconds)

            print("\n✓ Done")

        except Exception as e:
            print(f"\n✗ Error: {e}")
            if args.debug:
                import traceback
                traceback.print_exc()
            sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
