import pytest

from psychocalc.calculators.baremos import (
    ItemScale,
    generate_baremos,
    generated_level_flags,
    partition_range,
    resolve_level_names,
)
from psychocalc.calculators.survey import Dimension, Variable
from psychocalc.core.errors import ValidationError
from psychocalc.services.calculations import baremo_table_out
from psychocalc.services.tables import baremo_table


def _variable(*item_counts, name="Compromiso"):
    return Variable(
        name=name,
        dimensions=tuple(Dimension(name=f"D{i + 1}", item_count=k) for i, k in enumerate(item_counts)),
    )


def test_ten_items_three_levels_scenario():
    table = generate_baremos(ItemScale(min=1, max=5), [_variable(10)], 3, ["Bajo", "Medio", "Alto"])

    dimension_row = table.rows[0]
    assert (dimension_row.min_raw, dimension_row.max_raw) == (10, 50)
    assert [level.display for level in dimension_row.levels] == ["10 - 23", "24 - 36", "37 - 50"]
    assert table.headers == ["Component", "Bajo", "Medio", "Alto"]
    assert table.as_rows()[0] == ["D1", "10 - 23", "24 - 36", "37 - 50"]


def test_total_component_follows_dimensions():
    table = generate_baremos(ItemScale(min=1, max=4), [_variable(3, 5, name="Clima")], 2)

    assert [row.component for row in table.rows] == ["D1", "D2", "TOTAL (Clima)"]
    total = table.rows[-1]
    assert total.is_total
    assert total.item_count == 8
    assert (total.min_raw, total.max_raw) == (8, 32)


@pytest.mark.parametrize("level_count", [2, 3, 4, 5])
@pytest.mark.parametrize("item_count", [1, 3, 7, 10, 23])
@pytest.mark.parametrize("scale", [(1, 5), (0, 3), (1, 7)])
def test_levels_are_contiguous_and_cover_the_span(level_count, item_count, scale):
    item_scale = ItemScale(min=scale[0], max=scale[1])
    min_raw, max_raw = item_count * item_scale.min, item_count * item_scale.max
    if item_count * (item_scale.max - item_scale.min) < level_count:
        pytest.skip("span narrower than the number of levels")

    levels = partition_range(min_raw, max_raw, resolve_level_names(level_count))

    assert levels[0].lower_bound == min_raw
    assert levels[-1].upper_bound == max_raw
    for previous, current in zip(levels, levels[1:]):
        assert current.lower_bound == previous.upper_bound + 1
    for level in levels:
        assert level.lower_bound <= level.upper_bound


def test_missing_level_names_default():
    assert resolve_level_names(4, ["Bajo", "", "Alto"]) == ("Bajo", "Level 2", "Alto", "Level 4")


def test_level_templates():
    assert resolve_level_names(2) == ("Low", "High")
    assert resolve_level_names(5) == ("Very low", "Low", "Average", "High", "Very high")


@pytest.mark.parametrize("level_count", [1, 6])
def test_level_count_out_of_bounds(level_count):
    with pytest.raises(ValidationError):
        generate_baremos(ItemScale(min=1, max=5), [_variable(4)], level_count)


def test_filled_level_labels_follow_the_locale():
    table = generate_baremos(ItemScale(min=1, max=5), [_variable(10)], 3, ["Bajo", "Medio"])

    assert baremo_table_out(table, "es").level_names == ["Bajo", "Medio", "Nivel 3"]
    assert baremo_table_out(table, "en").level_names == ["Bajo", "Medio", "Level 3"]
    assert baremo_table(table, "es").headers[1:] == ("Bajo", "Medio", "Nivel 3")
    assert baremo_table_out(table, "es").rows[0].levels[2].label == "Nivel 3"


def test_caller_level_names_are_kept_verbatim():
    chosen = generate_baremos(ItemScale(min=1, max=5), [_variable(4)], 2, ["Low", "High"])
    template = generate_baremos(ItemScale(min=1, max=5), [_variable(4)], 2)

    assert chosen.generated == (False, False)
    assert baremo_table_out(chosen, "es").level_names == ["Low", "High"]
    assert baremo_table_out(template, "es").level_names == ["Bajo", "Alto"]
    assert generated_level_flags(3, ["Bajo", ""]) == (False, True, True)
