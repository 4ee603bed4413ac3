import argparse
import sys

from bfcount.modules.count import main as count_main
from bfcount.modules.count import pipeline
from bfcount.modules.count.config import ResourceExhaustedError
from bfcount.modules.count.report import ReportPrinter

from .accuracy import compare, exact_counts


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser("eval")
    count_main.add_filter_args(parser)
    parser.add_argument(
        "-m",
        "--mode",
        help="concurrent phase 1 mode to measure",
        choices=["threaded", "lockstep"],
        default="lockstep",
    )
    parser.add_argument(
        "--exact",
        help="also check the sequential run against a brute-force count",
        action="store_true",
    )
    return parser.parse_args(argv[1:])


def run(argv: list[str]) -> int:
    args = parse_args(argv)
    try:
        sequence = count_main.load_sequence(args.data)
        reference_config = count_main.build_config(args, sequence, mode="sequential")
        observed_config = count_main.build_config(args, sequence, mode=args.mode)
    except (OSError, ValueError) as err:
        print(f"\n{err}", file=sys.stderr)
        return 1
    try:
        print("running sequential filter... ", end="", flush=True)
        reference = pipeline.run(sequence, reference_config)
        print("done")
        print(f"running {args.mode} filter ({observed_config.lanes} lanes)... ", end="", flush=True)
        observed = pipeline.run(sequence, observed_config)
        print("done")
    except ResourceExhaustedError as err:
        print(f"\nout of memory: {err}", file=sys.stderr)
        return 2
    report = ReportPrinter(args.table_format)
    accuracy = compare(reference, observed)
    report.section(
        "Candidates",
        ["Sequential phase 1 candidates", reference.stats.num_candidates],
        [f"{args.mode.title()} phase 1 candidates", observed.stats.num_candidates],
        ["Sequential false positives removed", reference.stats.num_false_positives],
        [f"{args.mode.title()} false positives removed", observed.stats.num_false_positives],
    )
    report.section(f"{args.mode.title()} vs sequential", accuracy)
    status = 0 if accuracy.is_subset else 1
    if args.exact:
        truth = compare(exact_counts(sequence, reference_config.k), reference)
        report.section("Sequential vs brute force", truth)
        status = status if truth.is_subset else 1
    return status
