import pytest

from psychocalc.calculators.matrix import ResponseMatrix
from psychocalc.calculators.scale import NEW_OPTION_LABEL, RatingScale
from psychocalc.core.errors import ScaleTooSmallError


def test_zeros_builds_rectangular_matrix():
    matrix = ResponseMatrix.zeros(3, 4)
    assert matrix.shape == (3, 4)
    assert all(cell == 0 for row in matrix for cell in row)


def test_with_cell_is_copy_on_write():
    matrix = ResponseMatrix.zeros(3, 2)
    edited = matrix.with_cell(1, 0, "2")

    assert edited is not matrix
    assert matrix.rows[1] == (0, 0)
    assert edited.rows[1] == (2, 0)
    # Untouched rows are shared, the touched one is replaced.
    assert edited.rows[0] is matrix.rows[0]
    assert edited.rows[2] is matrix.rows[2]
    assert edited.rows[1] is not matrix.rows[1]


def test_with_cell_coerces_non_numeric_to_zero():
    matrix = ResponseMatrix.zeros(1, 1).with_cell(0, 0, 5).with_cell(0, 0, "mucho")
    assert matrix.rows[0] == (0,)


def test_with_cell_out_of_range():
    with pytest.raises(IndexError):
        ResponseMatrix.zeros(2, 2).with_cell(2, 0, 1)


def test_from_raw_pads_and_truncates_to_first_row():
    matrix = ResponseMatrix.from_raw([[2, "2", 1], [1], [2, 2, 2, 9]])
    assert matrix.shape == (3, 3)
    assert matrix.as_lists() == [[2, 2, 1], [1, 0, 0], [2, 2, 2]]


def test_from_raw_empty_table():
    assert ResponseMatrix.from_raw([]).shape == (0, 0)


def test_matrix_rejects_ragged_rows():
    with pytest.raises(ValueError):
        ResponseMatrix(rows=((1, 2), (3,)), column_count=2)


def test_default_scale():
    scale = RatingScale.default()
    assert [(o.label, o.value) for o in scale] == [("Nada", 0), ("Poco", 1), ("Mucho", 2)]
    assert (scale.lo, scale.hi, scale.spread) == (0, 2, 2)
    assert scale.is_usable


def test_with_option_defaults_to_next_value():
    scale = RatingScale.default().with_option()
    assert len(scale) == 4
    assert scale.options[-1].label == NEW_OPTION_LABEL
    assert scale.options[-1].value == 3


def test_without_option_keeps_two_minimum():
    scale = RatingScale.from_pairs([("No", 0), ("Sí", 1)])
    with pytest.raises(ScaleTooSmallError):
        scale.without_option(0)
    assert len(scale) == 2

    bigger = RatingScale.default().without_option(1)
    assert [o.value for o in bigger] == [0, 2]


def test_with_edit_coerces_value():
    scale = RatingScale.default().with_edit(2, value="abc")
    assert scale.options[2].value == 0
    assert scale.spread == 1
    relabelled = RatingScale.default().with_edit(0, label="Nunca")
    assert relabelled.options[0].label == "Nunca"
    assert relabelled.options[0].value == 0


def test_zero_spread_scale_is_not_usable():
    scale = RatingScale.from_pairs([("A", 1), ("B", 1)])
    assert scale.spread == 0
    assert not scale.is_usable
