import argparse
import sys

from bfcount.modules.hist.histogram import write_histogram

from . import pipeline, utils
from .config import MODES, Config, ConfigError, ResourceExhaustedError, approximate_bf_size
from .report import ReportPrinter, table_formats


def add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-k", help="k-mer length (at most 32)", type=int)
    parser.add_argument(
        "-b",
        "--bf-size",
        help="Bloom filter size in bits [accepted units: B (bits), k, M, G]",
        type=utils.validate_bf_size,
    )
    parser.add_argument(
        "--fpr",
        help="target false-positive rate, used to size the filter when -b is not given",
        type=float,
        default=0.01,
    )
    parser.add_argument("-H", "--hashes", help="number of hash functions", type=int)
    parser.add_argument("-l", "--lanes", help="number of phase 1 lanes", type=int)
    parser.add_argument("-t", "--threads", help="number of phase 2 workers", type=int)
    parser.add_argument("--seed", help="hash seed", type=int)
    parser.add_argument(
        "-c",
        "--config",
        help="path to run config file (json); command line values take precedence",
        type=utils.validate_config_json,
        default=dict(),
    )
    parser.add_argument(
        "-f",
        "--table-format",
        help="stdout table format",
        choices=table_formats(),
        default="simple_outline",
    )
    parser.add_argument("data", help="path to FASTA/FASTQ files (may be gzipped)", nargs="+")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser("count")
    add_filter_args(parser)
    parser.add_argument("-m", "--mode", help="phase 1 execution mode", choices=MODES)
    parser.add_argument("-o", help="path to output TSV file", required=True)
    parser.add_argument("--hist", help="path to output histogram (ntCard format)")
    return parser.parse_args(argv[1:])


def build_config(args: argparse.Namespace, sequence: str, **overrides) -> Config:
    num_bits = args.bf_size if args.bf_size is not None else args.config.get("num_bits")
    num_hashes = args.hashes if args.hashes is not None else args.config.get("num_hashes", 3)
    if num_bits is None:
        num_bits = approximate_bf_size(len(sequence), num_hashes, args.fpr)
        print(f"Calculated Bloom filter size: {num_bits} bits")
    values = dict(
        k=args.k,
        num_bits=num_bits,
        num_hashes=num_hashes,
        lanes=args.lanes,
        workers=args.threads,
        seed=args.seed,
    )
    values.update(overrides)
    return Config.from_dict(args.config, **values)


def load_sequence(paths: list[str]) -> str:
    for path in paths:
        print(f"reading {path}... ", end="", flush=True)
    sequence = utils.read_sequence(paths)
    print("done")
    return sequence


def run(argv: list[str]) -> int:
    args = parse_args(argv)
    try:
        sequence = load_sequence(args.data)
        config = build_config(args, sequence, mode=args.mode)
    except (OSError, ValueError) as err:
        print(f"\n{err}", file=sys.stderr)
        return 1
    print(f"counting {config.k}-mers ({config.mode}, {config.lanes} lanes)... ", end="", flush=True)
    try:
        counts = pipeline.run(sequence, config)
    except ConfigError as err:
        print(f"\ninvalid configuration: {err}", file=sys.stderr)
        return 1
    except ResourceExhaustedError as err:
        print(f"\nout of memory: {err}", file=sys.stderr)
        return 2
    print("done")
    utils.save_counts(counts, args.o)
    print(f"Saved {len(counts)} k-mer counts to {args.o}")
    if args.hist:
        write_histogram(counts.histogram(), counts.stats.num_windows, args.hist)
        print(f"Saved histogram to {args.hist}")
    report = ReportPrinter(args.table_format)
    report.section(
        "K-mer statistics",
        ["Repeated k-mers", len(counts)],
        ["Repeated k-mer occurrences", counts.total],
        counts.stats,
    )
    report.section(
        "Timing",
        ["Phase 1 (filter)", f"{counts.stats.phase1_seconds:.3f}s"],
        ["Phase 2 (count)", f"{counts.stats.phase2_seconds:.3f}s"],
    )
    return 0
