import pytest

from psychocalc.calculators.cronbach import (
    CronbachResult,
    CronbachRowError,
    VariableRange,
    cronbach_by_variables,
    cronbach_global,
    cronbach_subset,
    interpret_alpha,
    load_subject_table,
)
from psychocalc.core.errors import InvalidRangeError


def test_identical_items_give_alpha_one():
    result = cronbach_subset([[4, 4], [2, 2], [3, 3]], 1, 2)

    assert result.n_items == 2
    assert result.n_subjects == 3
    assert result.sum_item_variances == pytest.approx(2.0)
    assert result.total_variance == pytest.approx(4.0)
    assert result.alpha == pytest.approx(1.0)
    assert result.interpretation == "Very high"


def test_known_alpha_value():
    rows = [[1, 2, 3], [2, 3, 3], [3, 3, 4], [4, 5, 5], [2, 2, 2]]
    result = cronbach_subset(rows, 1, 3)
    # item variances 1.3, 1.5, 1.3; total variance 11.2
    assert result.alpha == pytest.approx(1.5 * (1 - 4.1 / 11.2), abs=1e-9)


@pytest.mark.parametrize("start, end", [(2, 2), (3, 1), (0, 2)])
def test_invalid_ranges_are_rejected(start, end):
    with pytest.raises(InvalidRangeError):
        cronbach_subset([[1, 2, 3]], start, end)


def test_constant_totals_give_zero_alpha():
    result = cronbach_subset([[1, 3], [2, 2], [3, 1]], 1, 2)
    assert result.total_variance == 0
    assert result.alpha == 0.0


def test_single_subject_has_zero_variance():
    result = cronbach_subset([[1, 5, 3]], 1, 3)
    assert result.sum_item_variances == 0.0
    assert result.total_variance == 0.0
    assert result.alpha == 0.0


def test_cells_past_row_end_read_as_zero():
    padded = cronbach_subset([[4, 4, 0], [2, 2, 0], [3, 3, 0]], 1, 3)
    short = cronbach_subset([[4, 4], [2, 2], [3, 3]], 1, 3)
    assert short.alpha == pytest.approx(padded.alpha)


def test_global_spans_every_column():
    result = cronbach_global([[4, 4, 4], [2, 2, 2], [3, 3, 3]])
    assert (result.label, result.start, result.end) == ("Global", 1, 3)
    assert result.alpha == pytest.approx(1.0)


def test_variables_mode_isolates_bad_ranges():
    rows = [[4, 4, 1, 5], [2, 2, 3, 3], [3, 3, 2, 4]]
    results = cronbach_by_variables(
        rows,
        [
            VariableRange("Autoeficacia", 1, 2),
            VariableRange("Suelta", 3, 3),
            VariableRange("Resto", 3, 4),
        ],
    )

    assert isinstance(results[0], CronbachResult)
    assert results[0].alpha == pytest.approx(1.0)
    assert isinstance(results[1], CronbachRowError)
    assert results[1].label == "Suelta"
    assert "at least two items" in results[1].error
    assert isinstance(results[2], CronbachResult)


@pytest.mark.parametrize(
    "alpha, band",
    [(0.95, "Very high"), (0.81, "Very high"), (0.8, "High"), (0.61, "High"), (0.5, "Medium"), (0.3, "Low"), (0.1, "Very low"), (-0.4, "Very low")],
)
def test_interpretation_bands(alpha, band):
    assert interpret_alpha(alpha) == band


def test_load_subject_table_drops_header_and_pads():
    rows = load_subject_table([["P1", "P2", "P3"], [1, "2"], ["3", "x", 5]])
    assert rows == ((1.0, 2.0, 0.0), (3.0, 0.0, 5.0))
