import argparse
import logging
import sys

from sitemapcrawl.container import Container
from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.exceptions import OutputDirError, SitemapFetchError

VERSION = "0.1.0"
PROG = "sitemap-crawler"

logger = logging.getLogger("sitemapcrawl")


def _non_negative_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number, got {raw!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative number, got {raw!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Extract content from sitemap URLs and save as markdown files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    sub = parser.add_subparsers(dest="command", required=True)

    crawl = sub.add_parser(
        "crawl",
        help="Extract content from URLs in a sitemap and save as markdown files",
    )
    crawl.add_argument("url", help="Sitemap URL to fetch URLs from")
    crawl.add_argument("output_dir", metavar="output-dir", help="Directory to save extracted markdown files")
    crawl.add_argument("--debug", action="store_true", help="Enable debug mode")
    crawl.add_argument(
        "--continue",
        dest="continue_on_error",
        action="store_true",
        help="Continue processing even if an URL fails",
    )
    crawl.add_argument(
        "-r", "--retries",
        type=_non_negative_int,
        default=3,
        help="Number of retry attempts for failed URLs (default: 3)",
    )
    crawl.add_argument(
        "-d", "--retry-delay",
        type=_non_negative_int,
        default=1000,
        help="Initial delay between retries in milliseconds (default: 1000)",
    )
    crawl.add_argument(
        "-l", "--rate-limit",
        type=_non_negative_int,
        default=1,
        help="Maximum number of requests per second, 0 to disable (default: 1)",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> CrawlOptions:
    return CrawlOptions(
        continue_on_error=args.continue_on_error,
        max_retries=args.retries,
        initial_retry_delay_ms=args.retry_delay,
        rate_per_second=args.rate_limit,
        debug=args.debug,
    )


def configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)
    # urllib3 is chatty at DEBUG and adds nothing to per-URL attempt logs
    logging.getLogger("urllib3").setLevel(logging.INFO)


def main(argv=None, container: Container = None) -> int:
    """Run the CLI and return the process exit code.

    0 when the batch completed (failures included under --continue), 1 when
    setup failed or the run halted on a failed URL.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)
    options = options_from_args(args)
    if options.debug:
        logger.debug("Debug mode enabled")

    container = container or Container()
    crawler = container.crawler()

    try:
        summary = crawler.run(args.url, args.output_dir, options)
    except OutputDirError as e:
        logger.error("Error creating output directory: %s", e)
        return 1
    except SitemapFetchError as e:
        logger.error("Error fetching sitemap: %s", e)
        return 1

    logger.debug("Run summary: %s", summary.as_dict())
    if summary.halted:
        return 1
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == '__main__':
    cli()
