#!/usr/bin/env python3
"""
Streaming histogram of numbers read from a file or stdin.

Examples:
    # histogram of the file sizes in the current directory
    ls -la | awk 'NR>1 {print $5}' | streamhist -b 5

    # the same as JSON, without the text plot
    ls -la | awk 'NR>1 {print $5}' | streamhist -b 5 -j -n

    # summary statistics of the first column of a table
    tail -n +2 data.tsv | streamhist -s -b 15 -w 20

    # save the histogram, then load it and resize to 10 bins
    tail -n +2 data.tsv | streamhist -b 15 -o hist.parquet
    streamhist -ir -b 10 -l hist.parquet
"""

import argparse
import sys
from pathlib import Path

from tabulate import tabulate

from . import serde
from .density import KernelDensity
from .hist import StreamHist
from .parse import read_values
from .utils.config import load_config, validate_config
from .utils.exceptions import StreamHistError
from .utils.logging import get_logger, log_execution_time, setup_logging

logger = get_logger(__name__)

IO_ERROR_CODE = 74
BAR_CHAR = "■"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streamhist",
        description="Streaming histogram (Ben-Haim & Tom-Tov, 2010)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-b", "--number-of-bins", type=int, default=None, metavar="NUMBER",
        help="The number of bins (default: STREAMHIST_BINS or 10)",
    )
    parser.add_argument(
        "-r", "--force-resize", action="store_true",
        help="Resize the histogram to the number of bins given by -b",
    )
    parser.add_argument(
        "-l", "--load-from", type=Path, default=None, metavar="PATH",
        help="Initialize the histogram from the file (parquet unless the extension is .json)",
    )
    parser.add_argument(
        "-o", "--output-file", type=Path, default=None, metavar="PATH",
        help="Save the histogram to the file (parquet unless the extension is .json)",
    )
    parser.add_argument(
        "-f", "--field", type=int, default=1, metavar="NUMBER",
        help="Use the nth whitespace separated field of the input (default: 1)",
    )
    parser.add_argument("-j", "--json", action="store_true", help="Print JSON of the histogram")
    parser.add_argument("-s", "--statistics", action="store_true", help="Print the statistics")
    parser.add_argument(
        "-n", "--no-summary", action="store_true", help="Don't print the histogram bars",
    )
    parser.add_argument(
        "-w", "--width", type=int, default=None, metavar="NUMBER",
        help="Maximal width of the histogram bars (default: STREAMHIST_WIDTH or 10)",
    )
    parser.add_argument(
        "-i", "--ignore-input", action="store_true",
        help="Don't update the histogram (ignore FILE and stdin)",
    )
    parser.add_argument(
        "-d", "--density", type=float, action="append", default=[], metavar="X",
        help="Print the kernel density estimate at X (repeatable)",
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=None, metavar="PATH",
        help="JSON configuration file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "file", nargs="?", type=Path, default=None,
        help="Input data file, if not given, the input is read from stdin",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and validate the CLI arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.field < 1:
        parser.error("field index needs to start at 1")
    if args.number_of_bins is not None and args.number_of_bins < 1:
        parser.error("the number of bins needs to be at least 1")
    if args.width is not None and args.width < 1:
        parser.error("the width needs to be at least 1")
    return args


def initialize_histogram(args: argparse.Namespace) -> StreamHist:
    """Fresh histogram, or the one stored at `--load-from`."""
    if args.load_from is not None:
        return serde.load(args.load_from)
    return StreamHist(args.number_of_bins)


@log_execution_time
def read_data(hist: StreamHist, args: argparse.Namespace) -> int:
    """Update the histogram with the values from FILE or stdin, return how many were read."""
    before = hist.total_count()
    source = "stdin" if args.file is None else args.file
    logger.debug(f"Reading field {args.field} of {source}")
    if args.file is None:
        hist.extend(read_values(sys.stdin, args.field - 1))
    else:
        with open(args.file, encoding="utf-8") as f:
            hist.extend(read_values(f, args.field - 1))
    return hist.total_count() - before


def format_bin(mean: float, count: int, max_count: int, width: int) -> str:
    """Bin mean, count and a bar scaled relative to the largest count."""
    bar_width = round(count / max_count * width)
    return f"{mean:8.4g} {count}\t{BAR_CHAR * bar_width}"


def print_histogram(hist: StreamHist, width: int) -> None:
    print("mean\tcount")
    if hist.is_empty():
        return
    max_count = max(b.count for b in hist)
    for b in hist:
        print(format_bin(b.mean, b.count, max_count, width))


def statistics_table(hist: StreamHist) -> list[tuple[str, float]]:
    return [
        ("Mean", hist.mean()),
        ("StDev", hist.std_dev()),
        ("Min", hist.min),
        ("25% quantile", hist.quantile(0.25)),
        ("Median", hist.median()),
        ("75% quantile", hist.quantile(0.75)),
        ("Max", hist.max),
        ("Sample size", hist.total_count()),
    ]


def print_statistics(hist: StreamHist) -> None:
    if hist.is_empty():
        logger.warning("No statistics for an empty histogram")
        return
    print(tabulate(statistics_table(hist), tablefmt="plain", floatfmt=".4g"))


def print_density(hist: StreamHist, points: list[float], kernel: str, rule: str) -> None:
    kde = KernelDensity.from_hist(hist, kernel=kernel, rule=rule)
    logger.debug(f"Kernel density with {kde.kernel} kernel, bandwidth {kde.bandwidth:.4g}")
    rows = [(x, kde.density(x)) for x in points]
    print(tabulate(rows, headers=["x", "density"], tablefmt="plain", floatfmt=".4g"))


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except StreamHistError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    errors = validate_config(config)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)

    setup_logging("DEBUG" if args.verbose else config["STREAMHIST_LOG_LEVEL"])
    if args.number_of_bins is None:
        args.number_of_bins = config["STREAMHIST_BINS"]
    if args.width is None:
        args.width = config["STREAMHIST_WIDTH"]

    try:
        hist = initialize_histogram(args)
    except (OSError, StreamHistError) as e:
        print(f"failed to initialize the histogram: {e}", file=sys.stderr)
        sys.exit(IO_ERROR_CODE)

    if args.force_resize:
        hist.resize(args.number_of_bins)

    if not args.ignore_input:
        try:
            count = read_data(hist, args)
        except (OSError, UnicodeDecodeError) as e:
            print(f"failed to read the input: {e}", file=sys.stderr)
            sys.exit(IO_ERROR_CODE)
        logger.info(f"Inserted {count} values, {len(hist)} bins")

    if args.json:
        print(serde.to_json(hist))
    if not args.no_summary:
        print_histogram(hist, args.width)
    if args.statistics:
        print_statistics(hist)
    if args.density:
        try:
            print_density(
                hist, args.density, config["STREAMHIST_KERNEL"], config["STREAMHIST_BANDWIDTH_RULE"]
            )
        except StreamHistError as e:
            print(f"failed to estimate the density: {e}", file=sys.stderr)
            sys.exit(1)

    if args.output_file is not None:
        try:
            serde.save(hist, args.output_file)
        except OSError as e:
            print(f"failed to write the output: {e}", file=sys.stderr)
            sys.exit(IO_ERROR_CODE)


if __name__ == "__main__":
    main()
