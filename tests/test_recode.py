from psychocalc.calculators.recode import LikertBounds, RawTable, recode, reflect, toggle_column

BOUNDS = LikertBounds(min=1, max=5)


def _table():
    return RawTable.from_cells(
        [
            ["Sujeto", "P1", "P2", "P3"],
            ["Ana", 1, "2", 5],
            ["Luis", 4, "n/a", 3.5],
            ["Eva", None, 3, ""],
        ]
    )


def test_reflect_formula():
    assert reflect(1, BOUNDS) == 5
    assert reflect(2, BOUNDS) == 4
    assert reflect(3.5, BOUNDS) == 2.5
    assert isinstance(reflect(2.0, BOUNDS), int)


def test_only_selected_numeric_cells_change():
    recoded = recode(_table(), {1, 2}, BOUNDS)

    assert recoded.headers == ("Sujeto", "P1", "P2", "P3")
    assert recoded.rows[0] == ("Ana", 5, 4, 5)
    assert recoded.rows[1] == ("Luis", 2, "n/a", 3.5)
    assert recoded.rows[2] == ("Eva", None, 3, "")


def test_recode_twice_restores_numeric_values():
    table = RawTable.from_cells([["A", "B"], [1, 2], [3, 4.5], [5, 1]])
    twice = recode(recode(table, {0, 1}, BOUNDS), {0, 1}, BOUNDS)
    assert twice.rows == table.rows


def test_recode_twice_restores_decimal_cells():
    table = RawTable.from_cells([["P1", "P2"], [1.01, 2.3], [4.99, 1.03]])
    once = recode(table, {0, 1}, BOUNDS)
    assert once.rows == ((4.99, 3.7), (1.01, 4.97))
    assert recode(once, {0, 1}, BOUNDS).rows == table.rows


def test_source_table_is_not_modified():
    table = _table()
    before = table.as_lists()
    recoded = recode(table, {1, 2, 3}, BOUNDS)
    assert table.as_lists() == before
    assert recoded is not table


def test_non_selected_columns_pass_through():
    recoded = recode(_table(), set(), BOUNDS)
    assert recoded.rows == _table().rows


def test_preview_is_capped():
    table = RawTable.from_cells([["P1"], *[[i] for i in range(80)]])
    assert len(table.preview(50)) == 50
    assert table.preview(50)[0] == (0,)


def test_toggle_column():
    selected = toggle_column(frozenset(), 2)
    assert selected == {2}
    assert toggle_column(selected, 2) == frozenset()
    assert toggle_column([1], 3) == {1, 3}


def test_from_cells_empty():
    empty = RawTable.from_cells([])
    assert empty.headers == ()
    assert empty.rows == ()
