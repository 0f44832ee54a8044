"""Manual scraper runner for testing and debugging selectors.

Runs the full scrape pipeline once (robots.txt check, initial page,
pagination, optional export) and prints the records it found.

Usage:
    python scripts/run_scraper.py --url https://books.toscrape.com/ --selector "h3 a"
    python scripts/run_scraper.py --url https://books.toscrape.com/ --selector "h3 a" --output books.csv
    python scripts/run_scraper.py --url https://books.toscrape.com/ --selector "h3 a" --no-paginate --limit 5
"""

import argparse
import asyncio
import sys

from shopscraper.config import settings
from shopscraper.core.exceptions import ConfigError
from shopscraper.scrapers import ScrapeConfig, WebScraper


async def run_scraper(
    url: str,
    selector: str,
    output: str = None,
    paginate: bool = True,
    deadline: float = None,
    limit: int = 20,
) -> int:
    """Run one scrape and display the results.

    Args:
        url: First results page
        selector: CSS selector for listing elements
        output: Optional .json/.csv path the records are saved to
        paginate: Follow numbered result pages
        deadline: Optional time budget in seconds
        limit: Maximum number of records to display

    Returns:
        Process exit code
    """
    config = ScrapeConfig.from_settings(settings, paginate=paginate, output_file=output)

    print(f"\n{'='*70}")
    print(f"  Scraping {url}")
    print(f"{'='*70}")
    print(f"  Selector: {selector}")
    print(f"  Paginate: {paginate}")
    if output:
        print(f"  Output: {output}")
    print(f"{'='*70}\n")

    async with WebScraper(config) as scraper:
        try:
            records = await scraper.run(url, selector, deadline=deadline)
        except ConfigError as e:
            print(f"Error: {e.message}")
            return 2
        requests = scraper.request_count

    if not records:
        print("No records found.\n")
        return 1

    for i, record in enumerate(records[:limit], 1):
        print(f"[{i}] {record.title}")
        if record.url:
            print(f"    URL: {record.url}")
        if record.image:
            print(f"    Image: {record.image}")
        print()

    # Summary
    print(f"{'='*70}")
    print(f"  Summary")
    print(f"{'='*70}")
    print(f"  Total Records: {len(records)}")
    print(f"  Displayed: {min(limit, len(records))}")
    print(f"  Requests: {requests}")
    if output:
        print(f"  Saved to: {output}")
    print(f"{'='*70}\n")
    return 0


def main():
    """Parse arguments and run the scraper."""
    parser = argparse.ArgumentParser(
        description="Scrape listing records from a results page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_scraper.py --url https://books.toscrape.com/ --selector "h3 a"
  python scripts/run_scraper.py --url https://books.toscrape.com/ --selector "h3 a" --output books.json
        """,
    )

    parser.add_argument("--url", required=True, help="Absolute URL of the first results page")
    parser.add_argument("--selector", required=True, help="CSS selector for listing elements")
    parser.add_argument("--output", help="Save records to this .json or .csv file")
    parser.add_argument(
        "--no-paginate",
        dest="paginate",
        action="store_false",
        help="Only scrape the first page",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        default=settings.SCRAPE_DEADLINE_SECONDS,
        help="Stop after this many seconds and keep what was gathered",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum number of records to display (default: 20)",
    )

    args = parser.parse_args()

    sys.exit(asyncio.run(run_scraper(
        args.url, args.selector, args.output, args.paginate, args.deadline, args.limit,
    )))


if __name__ == "__main__":
    main()
