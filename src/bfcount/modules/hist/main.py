import argparse
import sys

from bfcount.modules.count.report import ReportPrinter, table_formats

from .histogram import KmerSpectrum


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser("hist")
    parser.add_argument("path", help="k-mer spectrum file (in ntCard format)")
    parser.add_argument(
        "-f",
        "--table-format",
        help="stdout table format",
        choices=table_formats(),
        default="simple_outline",
    )
    return parser.parse_args(argv[1:])


def run(cmd_args: list[str]) -> int:
    args = parse_args(cmd_args)
    try:
        spectrum = KmerSpectrum.read(args.path)
    except (OSError, ValueError) as err:
        print(f"cannot read histogram: {err}", file=sys.stderr)
        return 1
    ReportPrinter(args.table_format).section("K-mer spectrum", spectrum)
    return 0
