import csv
import json
import logging
import os
import subprocess
import tempfile
import unittest

from Bio import SeqIO

from bfcount.modules.eval.accuracy import exact_counts
from bfcount.modules.count.encoder import decode

from test_installation import bfcount

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")


def expected_counts(path, fmt, k):
    with open(path) as handle:
        sequence = "N".join(str(record.seq) for record in SeqIO.parse(handle, fmt))
    return {decode(key, k): count for key, count in exact_counts(sequence, k).items()}


def read_tsv(path):
    with open(path, newline="") as file:
        return {kmer: int(count) for kmer, count in csv.reader(file, delimiter="\t")}


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.logger = logging.getLogger("TestCommandLine")
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.INFO)
            formatter = logging.Formatter("[%(asctime)s | %(name)s] %(message)s")
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)
        self.out_dir = tempfile.TemporaryDirectory()
        self.reads = os.path.join(DATA_DIR, "reads.fa")

    def tearDown(self):
        self.out_dir.cleanup()

    def _run(self, *args):
        self.logger.info(f"running: bfcount {' '.join(args)}")
        return bfcount(*args, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)

    def test_count_fasta(self):
        out = os.path.join(self.out_dir.name, "counts.tsv")
        hist = os.path.join(self.out_dir.name, "counts.hist")
        proc = self._run(
            "count", "-k", "6", "-b", "1M", "-H", "3", "-l", "4", "-t", "3",
            "-m", "sequential", "-o", out, "--hist", hist, self.reads,
        )
        self.assertEqual(proc.returncode, 0)
        counts = read_tsv(out)
        self.logger.info(f"{len(counts)} repeated k-mers")
        self.assertEqual(counts, expected_counts(self.reads, "fasta", 6))
        self.assertIn("ACGTAC", counts)
        self.assertTrue(os.path.isfile(hist))
        self.assertEqual(self._run("hist", hist).returncode, 0)

    def test_count_fastq_with_sized_filter(self):
        reads = os.path.join(DATA_DIR, "reads.fq")
        out = os.path.join(self.out_dir.name, "counts.tsv")
        proc = self._run("count", "-k", "5", "--fpr", "0.001", "-m", "sequential", "-o", out, reads)
        self.assertEqual(proc.returncode, 0)
        self.assertEqual(read_tsv(out), expected_counts(reads, "fastq", 5))

    def test_count_with_config_file(self):
        config = os.path.join(self.out_dir.name, "config.json")
        with open(config, "w") as fp:
            json.dump({"k": 7, "num_bits": 1 << 16, "num_hashes": 2, "mode": "sequential"}, fp)
        out = os.path.join(self.out_dir.name, "counts.tsv")
        proc = self._run("count", "-c", config, "-o", out, self.reads)
        self.assertEqual(proc.returncode, 0)
        self.assertEqual(read_tsv(out), expected_counts(self.reads, "fasta", 7))

    def test_count_rejects_large_k(self):
        out = os.path.join(self.out_dir.name, "counts.tsv")
        proc = self._run("count", "-k", "33", "-b", "1k", "-o", out, self.reads)
        self.assertEqual(proc.returncode, 1)
        self.assertFalse(os.path.exists(out))

    def test_count_rejects_zero_hashes(self):
        out = os.path.join(self.out_dir.name, "counts.tsv")
        proc = self._run("count", "-k", "5", "-b", "1k", "-H", "0", "-o", out, self.reads)
        self.assertEqual(proc.returncode, 1)

    def test_eval(self):
        proc = self._run("eval", "-k", "5", "-b", "1M", "-l", "16", "--exact", self.reads)
        self.assertEqual(proc.returncode, 0)

    def test_eval_reports_lanes_from_config_file(self):
        config = os.path.join(self.out_dir.name, "config.json")
        with open(config, "w") as fp:
            json.dump({"k": 5, "num_bits": 1 << 20, "num_hashes": 2, "lanes": 8}, fp)
        proc = bfcount("eval", "-c", config, self.reads, capture_output=True, text=True)
        self.assertEqual(proc.returncode, 0)
        self.assertIn("lockstep filter (8 lanes)", proc.stdout)
