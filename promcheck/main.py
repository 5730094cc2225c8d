"""
promcheck Main Entrypoint
Command line interface for running metric checks
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from promcheck import __version__
from promcheck.config.loader import load_settings
from promcheck.errors import CheckFailedError, PromCheckError
from promcheck.factory import build_metric_checker
from promcheck.models.report import CheckReport
from promcheck.observability.logging import bind_check_context, configure_logging

logger = structlog.get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_CHECK_FAILED = 1
EXIT_CRASHED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="promcheck",
        description="Check that a service exposes the expected Prometheus metrics",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c", "--config", default=".promcheck.yaml", help="config file (default: .promcheck.yaml)"
    )
    parser.add_argument("-l", "--log-level", default="info", help="log level")
    parser.add_argument("--log-format", default="console", choices=["console", "json"])

    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Check exporter metrics")
    check.add_argument("-g", "--group", default="exporter", help="config group")
    check.add_argument("--base-url", help="scrape an already running exporter at this URL")
    check.add_argument("--report", help="write the check report as YAML to this path")
    check.add_argument(
        "--remove-all-images",
        action="store_true",
        help="remove every image used by the compose project on teardown",
    )
    check.add_argument(
        "--deadline", type=float, help="abort the check after this many seconds (teardown still runs)"
    )

    return parser


def write_report(report: CheckReport, path: Optional[str]) -> None:
    if not path:
        return
    Path(path).write_text(report.to_yaml(), encoding="utf-8")
    logger.info("Report written", path=path)


async def run_check(args: argparse.Namespace) -> int:
    """
    Run one check group

    Args:
        args: Parsed command line

    Returns:
        Process exit code
    """
    bind_check_context(group=args.group, config=args.config)

    # SIGTERM cancels the check; fixtures set up so far are still torn down
    task = asyncio.current_task()

    def signal_handler(signum):
        logger.info("Signal received", signal=signum)
        task.cancel()

    asyncio.get_running_loop().add_signal_handler(signal.SIGTERM, signal_handler, signal.SIGTERM)

    overrides = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.remove_all_images:
        overrides["remove_all_images"] = True
    try:
        settings = load_settings(args.config, args.group, overrides)
        checker = build_metric_checker(settings)

        if args.deadline:
            report = await asyncio.wait_for(checker.check(), timeout=args.deadline)
        else:
            report = await checker.check()
    except CheckFailedError as e:
        write_report(e.report, args.report)
        logger.error("Metrics check failed", details=str(e))
        return EXIT_CHECK_FAILED
    except asyncio.TimeoutError:
        logger.error("Crashed", error=f"check did not finish within {args.deadline}s")
        return EXIT_CRASHED
    except asyncio.CancelledError:
        logger.error("Crashed", error="check was interrupted")
        return EXIT_CRASHED
    except PromCheckError as e:
        logger.error("Crashed", error=str(e), exc_info=True)
        return EXIT_CRASHED
    except Exception as e:
        logger.error("Crashed", error=f"unexpected error: {e}", exc_info=True)
        return EXIT_CRASHED

    write_report(report, args.report)
    logger.info("Metrics check passed!")
    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entrypoint
    """
    args = build_parser().parse_args(argv)
    configure_logging(log_level=args.log_level, log_format=args.log_format)

    return asyncio.run(run_check(args))


if __name__ == "__main__":
    sys.exit(main())
