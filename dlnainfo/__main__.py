import sys
import asyncio
import logging
import argparse

from .errors import DLNAInfoError
from .report import Aggregator
from .ssdp import DISCOVER_TIMEOUT
from .util import _getLogger


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="dlnainfo",
        description="Show the ProtocolInfo and ConnectionIDs of every DLNA Media Renderer "
                    "on the local network.",
    )
    parser.add_argument(
        "-w", "--window", type=int, default=DISCOVER_TIMEOUT, metavar="SECONDS",
        help="how long to wait for SSDP replies (default: %(default)s)")
    parser.add_argument(
        "-k", "--keep-going", action="store_true",
        help="report a failing device's error in its section instead of stopping")
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="indent XML responses")
    parser.add_argument(
        "--async", dest="use_async", action="store_true",
        help="query the renderers concurrently")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="log debug information")
    args = parser.parse_args(argv)
    if args.window < 0:
        parser.error("--window must not be negative")
    return args


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    aggregator = Aggregator(args.window, keep_going=args.keep_going, pretty=args.pretty)
    try:
        if args.use_async:
            report = asyncio.run(aggregator.async_run())
        else:
            report = aggregator.run()
    except DLNAInfoError as exc:
        _getLogger("dlnainfo").debug("Report failed", exc_info=True)
        sys.stderr.write("Error: %s\n" % exc)
        return 1
    sys.stdout.buffer.write(report.encode("utf-8"))
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
