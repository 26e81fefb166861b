import math
import random

import pytest

from psychocalc.calculators.aiken import compute_aiken, threshold_for
from psychocalc.calculators.enums import Verdict
from psychocalc.calculators.matrix import ResponseMatrix
from psychocalc.calculators.scale import RatingScale
from psychocalc.core.errors import ValidationError
from psychocalc.core.metrics import get_metrics


def test_three_judges_scenario_is_valid():
    report = compute_aiken(ResponseMatrix.from_raw([[2, 2, 1]]), RatingScale.default(), 0.95)

    item = report.items[0]
    assert item.item_index == 1
    assert item.mean == pytest.approx(1.6667, abs=1e-4)
    assert item.v == pytest.approx(0.8333, abs=1e-4)
    assert item.v_display == "0.833"
    assert item.verdict is Verdict.VALID
    assert report.threshold == 0.70
    assert report.valid_count == 1


def test_v_stays_within_unit_interval():
    rng = random.Random(7)
    scale = RatingScale.from_pairs([("1", 1), ("2", 2), ("3", 3), ("4", 4), ("5", 5)])
    rows = [[rng.randint(1, 5) for _ in range(6)] for _ in range(40)]
    report = compute_aiken(ResponseMatrix.from_raw(rows), scale)
    assert all(0.0 <= item.v <= 1.0 for item in report.items)


def test_v_boundaries_at_scale_extremes():
    scale = RatingScale.from_pairs([("1", 1), ("2", 2), ("3", 3), ("4", 4)])
    report = compute_aiken(ResponseMatrix.from_raw([[4, 4, 4], [1, 1, 1]]), scale)
    assert report.items[0].v == 1.0
    assert report.items[1].v == 0.0
    assert [item.verdict for item in report.items] == [Verdict.VALID, Verdict.REVIEW]


def test_strict_confidence_raises_threshold():
    # mean 1.5 on a 0..2 scale gives V = 0.75
    matrix = ResponseMatrix.from_raw([[2, 1]])
    relaxed = compute_aiken(matrix, RatingScale.default(), 0.95)
    strict = compute_aiken(matrix, RatingScale.default(), 0.99)
    assert relaxed.items[0].verdict is Verdict.VALID
    assert strict.items[0].verdict is Verdict.REVIEW
    assert strict.threshold == 0.80


def test_verdict_uses_unrounded_value():
    # V = 0.6996... displays as 0.700 but stays below the cut-off
    scale = RatingScale.from_pairs([("lo", 0), ("hi", 10000)])
    report = compute_aiken(ResponseMatrix.from_raw([[6996]]), scale)
    assert report.items[0].v_display == "0.700"
    assert report.items[0].verdict is Verdict.REVIEW


def test_threshold_rejects_unknown_confidence():
    assert threshold_for(0.95) == 0.70
    assert threshold_for(0.99) == 0.80
    with pytest.raises(ValidationError):
        threshold_for(0.90)


def test_zero_range_scale_yields_nan_and_review():
    scale = RatingScale.from_pairs([("A", 2), ("B", 2)])
    report = compute_aiken(ResponseMatrix.from_raw([[2, 2]]), scale)
    assert math.isnan(report.items[0].v)
    assert report.items[0].v_display == "NaN"
    assert report.items[0].verdict is Verdict.REVIEW


def test_row_order_is_preserved():
    report = compute_aiken(ResponseMatrix.from_raw([[0, 0], [2, 2], [1, 1]]), RatingScale.default())
    assert [item.item_index for item in report.items] == [1, 2, 3]
    assert [item.v for item in report.items] == [0.0, 1.0, 0.5]


def test_engine_call_is_timed():
    compute_aiken(ResponseMatrix.zeros(2, 2), RatingScale.default())
    assert get_metrics()["engine.aiken"]["count"] == 1.0
