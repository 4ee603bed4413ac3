import argparse
import csv
import gzip
import json

from Bio import SeqIO

from .config import ConfigError, parse_bf_size
from .result import KmerCounts

RECORD_SEPARATOR = "N"

FORMATS = {
    ".fa": "fasta",
    ".fasta": "fasta",
    ".fna": "fasta",
    ".fq": "fastq",
    ".fastq": "fastq",
}


def validate_config_json(path: str) -> dict:
    try:
        with open(path) as fp:
            config = json.load(fp)
    except (OSError, json.JSONDecodeError) as err:
        raise argparse.ArgumentTypeError(f"cannot read config {path}: {err}")
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(f"config {path} must hold a json object")
    return config


def validate_bf_size(size_str: str) -> int:
    try:
        return parse_bf_size(size_str)
    except ConfigError as err:
        raise argparse.ArgumentTypeError(str(err))


def guess_format(path: str) -> str:
    name = path[:-3] if path.endswith(".gz") else path
    for ext, fmt in FORMATS.items():
        if name.endswith(ext):
            return fmt
    raise ConfigError(f"unrecognized sequence file extension: {path}")


def read_sequences(path: str):
    fmt = guess_format(path)
    opener = gzip.open if path.endswith(".gz") else open
    with opener(path, "rt") as handle:
        for record in SeqIO.parse(handle, fmt):
            yield str(record.seq)


def read_sequence(paths: list[str]) -> str:
    """Join every record of every file; the separator breaks k-mers across records."""
    return RECORD_SEPARATOR.join(seq for path in paths for seq in read_sequences(path))


def save_counts(counts: KmerCounts, out_path: str):
    with open(out_path, mode="w", newline="") as file:
        writer = csv.writer(file, delimiter="\t")
        writer.writerows(counts.kmers())
