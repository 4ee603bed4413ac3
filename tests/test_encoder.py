import unittest

import numpy as np

from bfcount.modules.count.config import ConfigError
from bfcount.modules.count.encoder import (
    decode,
    encode,
    encode_windows,
    region_keys,
    to_codes,
)
from bfcount.modules.count.partition import Region


class TestEncoder(unittest.TestCase):

    def test_packs_most_significant_first(self):
        self.assertEqual(encode("A"), 0)
        self.assertEqual(encode("T"), 3)
        self.assertEqual(encode("ACGT"), 0b00011011)
        self.assertEqual(encode("TA"), 0b1100)

    def test_order_sensitive(self):
        self.assertNotEqual(encode("ACGT"), encode("TGCA"))
        # reverse complements stay distinct keys
        self.assertNotEqual(encode("AAAC"), encode("GTTT"))

    def test_lowercase_is_accepted(self):
        self.assertEqual(encode("acgt"), encode("ACGT"))

    def test_invalid_symbols_reject_the_window(self):
        self.assertIsNone(encode("ACNT"))
        self.assertIsNone(encode("AC-T"))
        self.assertIsNone(encode("ACGÜ"))

    def test_window_length_bound(self):
        self.assertEqual(encode("T" * 32), 2**64 - 1)
        with self.assertRaises(ConfigError):
            encode("A" * 33)
        with self.assertRaises(ConfigError):
            encode("")

    def test_decode_inverts_encode(self):
        for kmer in ["A", "GATTACA", "TTTTGGGGCCCCAAAA", "ACGT" * 8]:
            self.assertEqual(decode(encode(kmer), len(kmer)), kmer)

    def test_all_short_windows_are_distinct(self):
        kmers = [a + b + c for a in "ACGT" for b in "ACGT" for c in "ACGT"]
        self.assertEqual(len({encode(kmer) for kmer in kmers}), 64)

    def test_encode_windows_matches_scalar(self):
        seq = "ACGTTGCANNAGGCTTACGATCGAT"
        for k in [1, 3, 5, 8]:
            keys, valid = encode_windows(to_codes(seq), k)
            self.assertEqual(keys.shape[0], len(seq) - k + 1)
            for i in range(len(seq) - k + 1):
                expected = encode(seq[i : i + k])
                self.assertEqual(bool(valid[i]), expected is not None)
                if expected is not None:
                    self.assertEqual(int(keys[i]), expected)

    def test_encode_windows_k32(self):
        seq = "ACGT" * 10
        keys, valid = encode_windows(to_codes(seq), 32)
        self.assertTrue(valid.all())
        self.assertEqual(int(keys[0]), encode(seq[:32]))
        self.assertEqual(int(keys[-1]), encode(seq[-32:]))

    def test_short_sequence_has_no_windows(self):
        keys, valid = encode_windows(to_codes("ACG"), 4)
        self.assertEqual(keys.shape[0], 0)
        self.assertEqual(valid.shape[0], 0)

    def test_region_keys_skips_invalid_windows(self):
        seq = "ACGTNACGT"
        keys, skipped = region_keys(to_codes(seq), Region(0, 0, len(seq)), 4)
        self.assertEqual(skipped, 4)
        self.assertEqual(keys.tolist(), [encode("ACGT"), encode("ACGT")])
        self.assertEqual(keys.dtype, np.uint64)
