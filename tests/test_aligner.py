from __future__ import annotations

import random
import unittest

import numpy as np

from core.aligner import OpKind, align, cost_dtype, edit_distance_matrix, similarity_ratio
from core.sequences import INVALID_CHARACTER, MISSING_INPUT, Sequence, ValidationError
from core.service import DEMO_EDITED, DEMO_ORIGINAL


def _naive_cost_matrix(original: str, edited: str):
    rows = [[0] * (len(edited) + 1) for _ in range(len(original) + 1)]
    for i in range(len(original) + 1):
        rows[i][0] = i
    for j in range(len(edited) + 1):
        rows[0][j] = j
    for i in range(1, len(original) + 1):
        for j in range(1, len(edited) + 1):
            if original[i - 1] == edited[j - 1]:
                rows[i][j] = rows[i - 1][j - 1]
            else:
                rows[i][j] = min(rows[i - 1][j - 1], rows[i - 1][j], rows[i][j - 1]) + 1
    return rows


def _random_pairs(count: int, seed: int = 7):
    rng = random.Random(seed)
    pairs = []
    for _ in range(count):
        original = "".join(rng.choice("ACGT") for _ in range(rng.randint(0, 25)))
        edited = list(original)
        for _ in range(rng.randint(0, 6)):
            action = rng.choice(("sub", "ins", "del"))
            if action == "ins" or not edited:
                edited.insert(rng.randint(0, len(edited)), rng.choice("ACGT"))
            elif action == "del":
                edited.pop(rng.randrange(len(edited)))
            else:
                edited[rng.randrange(len(edited))] = rng.choice("ACGT")
        pairs.append((original, "".join(edited)))
    return pairs


class SequenceTests(unittest.TestCase):
    def test_lowercase_input_is_normalized(self):
        seq = Sequence.from_text("acgT", "original")
        self.assertEqual(seq.symbols, "ACGT")
        self.assertEqual(len(seq), 4)

    def test_empty_sequence_is_valid(self):
        self.assertEqual(len(Sequence.from_text("", "edited")), 0)

    def test_none_is_rejected_as_missing(self):
        with self.assertRaises(ValidationError) as ctx:
            Sequence.from_text(None, "edited")
        self.assertEqual(ctx.exception.kind, MISSING_INPUT)
        self.assertEqual(ctx.exception.field, "edited")

    def test_direct_construction_validates(self):
        with self.assertRaises(ValidationError):
            Sequence("ACGN")

    def test_direct_construction_rejects_none_as_missing(self):
        with self.assertRaises(ValidationError) as ctx:
            Sequence(None)
        self.assertEqual(ctx.exception.kind, MISSING_INPUT)

    def test_direct_construction_rejects_non_string(self):
        with self.assertRaises(ValidationError) as ctx:
            Sequence(1234)
        self.assertEqual(ctx.exception.kind, MISSING_INPUT)


class AlignTests(unittest.TestCase):
    def test_cost_matrix_matches_reference_recurrence(self):
        for original, edited in _random_pairs(40):
            matrix = edit_distance_matrix(original, edited)
            self.assertEqual(matrix.tolist(), _naive_cost_matrix(original, edited))

    def test_reconstruction_of_both_sides(self):
        for original, edited in _random_pairs(60):
            result = align(original, edited)
            self.assertEqual(result.original_side(), original)
            self.assertEqual(result.edited_side(), edited)
            self.assertEqual(len(result.ops), result.match_count + result.edit_distance)

    def test_edit_distance_equals_matrix_corner(self):
        for original, edited in _random_pairs(30, seed=11):
            result = align(original, edited)
            matrix = edit_distance_matrix(original, edited)
            self.assertEqual(result.edit_distance, int(matrix[len(original), len(edited)]))

    def test_distance_is_symmetric_under_swap(self):
        for original, edited in _random_pairs(40, seed=3):
            forward = align(original, edited)
            backward = align(edited, original)
            self.assertEqual(forward.edit_distance, backward.edit_distance)
            self.assertEqual(forward.insertion_count, backward.deletion_count)
            self.assertEqual(forward.deletion_count, backward.insertion_count)
            self.assertEqual(forward.substitution_count + forward.match_count, backward.substitution_count + backward.match_count)

    def test_identity(self):
        result = align("GATTACA", "GATTACA")
        self.assertTrue(all(op.kind is OpKind.MATCH for op in result.ops))
        self.assertEqual(result.edit_distance, 0)
        self.assertEqual(similarity_ratio(result), 1.0)

    def test_empty_against_empty(self):
        result = align("", "")
        self.assertEqual(result.ops, ())
        self.assertEqual(result.similarity_ratio, 1.0)

    def test_empty_against_nonempty(self):
        result = align("", "ACGT")
        self.assertEqual([op.kind for op in result.ops], [OpKind.INSERTION] * 4)
        self.assertEqual([op.edited_index for op in result.ops], [0, 1, 2, 3])
        self.assertEqual(result.edit_distance, 4)
        self.assertEqual(result.similarity_ratio, 0.0)

    def test_nonempty_against_empty(self):
        result = align("ACG", "")
        self.assertEqual([op.kind for op in result.ops], [OpKind.DELETION] * 3)
        self.assertEqual(result.similarity_ratio, 0.0)

    def test_determinism(self):
        first = align(DEMO_ORIGINAL, DEMO_EDITED)
        second = align(DEMO_ORIGINAL, DEMO_EDITED)
        self.assertEqual(first, second)

    def test_invalid_character_reports_symbol_and_index(self):
        with self.assertRaises(ValidationError) as ctx:
            align("ACGX", "ACGT")
        self.assertEqual(ctx.exception.kind, INVALID_CHARACTER)
        self.assertEqual(ctx.exception.symbol, "X")
        self.assertEqual(ctx.exception.index, 3)
        self.assertEqual(ctx.exception.field, "original")

    def test_invalid_character_in_edited(self):
        with self.assertRaises(ValidationError) as ctx:
            align("ACGT", "AC-T")
        self.assertEqual(ctx.exception.field, "edited")
        self.assertEqual(ctx.exception.symbol, "-")
        self.assertEqual(ctx.exception.index, 2)

    def test_missing_argument(self):
        with self.assertRaises(ValidationError) as ctx:
            align(None, "ACGT")
        self.assertEqual(ctx.exception.kind, MISSING_INPUT)

    def test_case_insensitive(self):
        result = align("acgt", "ACGT")
        self.assertEqual(result.match_count, 4)
        self.assertEqual(result.original, "ACGT")

    def test_diagonal_preferred_over_indels(self):
        result = align("AC", "CA")
        self.assertEqual([op.kind for op in result.ops], [OpKind.SUBSTITUTION, OpKind.SUBSTITUTION])

    def test_deletion_placed_before_trailing_match(self):
        result = align("AA", "A")
        self.assertEqual([op.kind for op in result.ops], [OpKind.DELETION, OpKind.MATCH])
        self.assertEqual(result.ops[0].original_index, 0)
        self.assertEqual((result.ops[1].original_index, result.ops[1].edited_index), (1, 0))

    def test_insertion_placed_before_trailing_match(self):
        result = align("A", "AA")
        self.assertEqual([op.kind for op in result.ops], [OpKind.INSERTION, OpKind.MATCH])
        self.assertIsNone(result.ops[0].original)
        self.assertEqual(result.ops[0].edited_index, 0)

    def test_single_deletion_inside_sequence(self):
        result = align("GA", "A")
        self.assertEqual([op.kind for op in result.ops], [OpKind.DELETION, OpKind.MATCH])
        self.assertEqual(result.ops[0].original, "G")

    def test_demo_fixture_has_three_substitutions(self):
        result = align(DEMO_ORIGINAL, DEMO_EDITED)
        substitutions = [op for op in result.ops if op.kind is OpKind.SUBSTITUTION]
        self.assertEqual([op.original_index for op in substitutions], [8, 20, 22])
        self.assertEqual([(op.original, op.edited) for op in substitutions], [("T", "G"), ("T", "A"), ("G", "A")])
        self.assertEqual(result.insertion_count, 0)
        self.assertEqual(result.deletion_count, 0)
        self.assertAlmostEqual(result.similarity_ratio, 40 / 43)
        self.assertLess(result.similarity_ratio, 1.0)

    def test_symbol_that_expands_under_uppercase_is_reported(self):
        with self.assertRaises(ValidationError) as ctx:
            align("ACßT", "ACGT")
        self.assertEqual(ctx.exception.kind, INVALID_CHARACTER)
        self.assertEqual(ctx.exception.symbol, "ß")
        self.assertEqual(ctx.exception.index, 2)
        self.assertEqual(ctx.exception.field, "original")


class CostMatrixStorageTests(unittest.TestCase):
    def test_dtype_grows_with_input_length(self):
        self.assertEqual(cost_dtype(0, 0), np.dtype(np.int16))
        self.assertEqual(cost_dtype(5000, 5000), np.dtype(np.int16))
        self.assertEqual(cost_dtype(20000, 20000), np.dtype(np.int32))

    def test_limit_sized_input_uses_two_byte_cells(self):
        matrix = edit_distance_matrix("A" * 5000, "C" * 5000)
        self.assertEqual(matrix.dtype, np.dtype(np.int16))
        self.assertEqual(matrix.nbytes, 5001 * 5001 * 2)
        self.assertEqual(int(matrix[5000, 5000]), 5000)
        self.assertEqual(int(matrix[5000, 0]), 5000)
        self.assertEqual(int(matrix[0, 5000]), 5000)

    def test_narrow_dtype_keeps_exact_distances(self):
        original = "A" * 4000
        edited = "C" * 3900
        result = align(original, edited)
        self.assertEqual(result.edit_distance, 4000)
        self.assertEqual(result.substitution_count, 3900)
        self.assertEqual(result.deletion_count, 100)
        self.assertEqual(result.original_side(), original)
        self.assertEqual(result.edited_side(), edited)


if __name__ == "__main__":
    unittest.main()
