#!/usr/bin/env python3
"""
Site Check CLI
Usage: python scan.py [https://falaya.com] [--checks urls,mobile,visual] [--use-cache] [--headful]
"""

import argparse
import asyncio
import json
import sys

from playwright.async_api import Error as PlaywrightError

from sitecheck.config import ALL_CHECKS, HarnessConfig
from sitecheck.core.report import print_report
from sitecheck.core.runner import SiteCheckRunner
from sitecheck.logging_config import setup_logging
from sitecheck.models.types import SitecheckError


def main():
    parser = argparse.ArgumentParser(
        description="Site Check: navigation discovery and page QA for a marketing site",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  python scan.py\n"
               "  python scan.py https://falaya.com --checks urls\n"
               "  python scan.py --checks mobile --use-cache   # reuse reports/discovered-urls.json",
    )
    parser.add_argument("url", nargs="?", default=None, help="Site root URL (default: SITECHECK_BASE_URL or https://falaya.com)")
    parser.add_argument("--checks", default=",".join(ALL_CHECKS), help=f"Checks to run (default: {','.join(ALL_CHECKS)})")
    parser.add_argument("--use-cache", action="store_true", help="Reuse the discovery cache instead of crawling again")
    parser.add_argument("--reports-dir", default=None, help="Where reports and screenshots go (default: reports)")
    parser.add_argument("--headful", action="store_true", help="Run browser visibly")
    parser.add_argument("--json", action="store_true", help="Output results as JSON instead of tables")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    checks = [c.strip() for c in args.checks.split(",") if c.strip()]
    unknown = [c for c in checks if c not in ALL_CHECKS]
    if unknown:
        parser.error(f"unknown check(s): {', '.join(unknown)}")

    config = HarnessConfig.from_env(
        base_url=args.url,
        reports_dir=args.reports_dir,
        headless=False if args.headful else None,
    )

    if not args.json:
        print(f"\n  Site Check running against {config.base_url}")
        print(f"  Checks: {', '.join(checks)} | Reports: {config.reports_dir}", end="")
        print(" | Discovery: cached if available" if args.use_cache else " | Discovery: fresh crawl")
        print()

    result = asyncio.run(run_checks(config, checks, args.use_cache, quiet=args.json))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_report(result)

    sys.exit(1 if result.failures or result.errors else 0)


def _cli_progress(event_type: str, data: dict):
    if event_type == "check_started":
        print(f"   == {data.get('check', '')} ==")
    elif event_type == "discovery_started":
        print(f"   Discovering navigation on {data.get('url', '')}")
    elif event_type == "discovery_cached":
        print(f"   Using cached discovery ({data.get('nav_urls', 0)} URLs) from {data.get('path', '')}")
    elif event_type == "popup_dismissed":
        print(f"         Dismissed overlay: {', '.join(data.get('types', []))}")
    elif event_type == "section_probed":
        opened = "menu opened" if data.get("menu_opened") else "no menu"
        print(f"         {data.get('section', '')}: {data.get('urls', 0)} URLs ({opened}, from {data.get('source', '')})")
    elif event_type == "discovery_complete":
        print(f"   Discovered {data.get('nav_urls', 0)} navigation URLs")
    elif event_type == "visiting_page":
        print(f"   [{data.get('page_number', '?')}/{data.get('total', '?')}] Visiting {data.get('url', '')[:80]}")
    elif event_type == "page_checked":
        if data.get("result") == "FAIL":
            print(f"         [FAIL] {data.get('reason', '')[:100]}")
    elif event_type == "snapshot_captured":
        state = "ok" if data.get("ok") else "failed"
        print(f"   Snapshot {data.get('name', '')}: {state}")
    elif event_type == "report_written":
        print(f"   Report: {data.get('html', '')}")
    elif event_type == "check_failed":
        print(f"   [ERROR] {data.get('error', '')[:120]}")


async def run_checks(config: HarnessConfig, checks: list[str], use_cache: bool, quiet: bool = False):
    try:
        runner = SiteCheckRunner(
            config=config,
            checks=checks,
            on_progress=None if quiet else _cli_progress,
            use_cache=use_cache,
        )
        return await runner.run()
    except (SitecheckError, PlaywrightError) as e:
        print(f"\n  Error during run: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
