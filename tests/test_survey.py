import pytest

from psychocalc.calculators.enums import SummaryMode
from psychocalc.calculators.survey import (
    Dimension,
    SubjectRow,
    Variable,
    VariableSchema,
    aggregate,
    compile_schema,
    detect_mismatch,
    load_subjects,
    summary_headers,
    uniform_schema,
)


def _schema():
    return VariableSchema(
        variables=(
            Variable(
                name="Motivación",
                dimensions=(Dimension(name="Intrínseca", item_count=2), Dimension(name="Extrínseca", item_count=4)),
            ),
            Variable(name="Logro", dimensions=(Dimension(name="Notas", item_count=3),)),
        )
    )


def test_compile_assigns_running_offsets():
    compiled = compile_schema(_schema())

    assert compiled.total_columns == 9
    assert [(d.name, d.start_index, d.item_count) for d in compiled.dimensions] == [
        ("Intrínseca", 0, 2),
        ("Extrínseca", 2, 4),
        ("Notas", 6, 3),
    ]
    assert compiled.variables[1].start_index == 6
    assert compiled.dimensions[1].question_labels == ("P3", "P4", "P5", "P6")
    assert compiled.dimensions[1].question_span == "P3-P6"


def test_question_span_single_and_empty():
    compiled = compile_schema([Variable(name="V", dimensions=(Dimension("A", 1), Dimension("B", 0)))])
    assert compiled.dimensions[0].question_span == "P1"
    assert compiled.dimensions[1].question_span == ""


def test_average_of_items_not_average_of_dimensions():
    compiled = compile_schema(_schema())
    subject = SubjectRow(id=1, values=(4, 4, 1, 1, 1, 1, 2, 2, 2))

    summary = aggregate([subject], compiled, SummaryMode.AVERAGE)

    row = summary.rows[0]
    assert row.dimension_values[:2] == (4.0, 1.0)
    assert row.variable_totals[0] == 2.0
    assert row.variable_totals[0] != pytest.approx((4.0 + 1.0) / 2)


def test_sum_total_equals_sum_of_dimension_sums():
    compiled = compile_schema(_schema())
    subjects = [
        SubjectRow(id=1, values=(4, 4, 1, 1, 1, 1, 2, 2, 2)),
        SubjectRow(id=2, values=(5, 3, 2, 2, 4, 1, 0, 3, 1)),
    ]

    summary = aggregate(subjects, compiled, SummaryMode.SUM)

    for row in summary.rows:
        assert row.variable_totals[0] == sum(row.dimension_values[:2])
        assert row.variable_totals[1] == row.dimension_values[2]


def test_average_rounds_half_up_to_two_decimals():
    compiled = compile_schema([Variable(name="V", dimensions=(Dimension("D", 3),))])
    summary = aggregate([SubjectRow(id=1, values=(1, 1, 2))], compiled, SummaryMode.AVERAGE)
    assert summary.rows[0].dimension_values == (1.33,)


def test_empty_dimension_averages_to_zero():
    compiled = compile_schema([Variable(name="V", dimensions=(Dimension("A", 2), Dimension("Vacía", 0)))])
    summary = aggregate([SubjectRow(id=1, values=(3, 5))], compiled, SummaryMode.AVERAGE)
    assert summary.rows[0].dimension_values == (4.0, 0.0)


def test_headers_and_export_rows():
    compiled = compile_schema(_schema())
    summary = aggregate([SubjectRow(id=1, values=(4, 4, 1, 1, 1, 1, 2, 2, 2))], compiled, SummaryMode.SUM)

    assert summary.headers == (
        "Subject",
        "Motivación - Intrínseca (Sum)",
        "Motivación - Extrínseca (Sum)",
        "Motivación - TOTAL",
        "Logro - Notas (Sum)",
        "Logro - TOTAL",
    )
    assert summary.as_rows() == [[1, 8.0, 4.0, 12.0, 6.0, 6.0]]
    assert summary_headers(compiled, SummaryMode.AVERAGE)[1].endswith("(Avg)")


def test_load_subjects_drops_header_and_fits_width():
    compiled = compile_schema(uniform_schema(2, 2))
    table = [["P1", "P2", "P3", "P4"], [1, "2", "x", 4, 99], [5]]

    subjects = load_subjects(table, compiled)

    assert [s.id for s in subjects] == [1, 2]
    assert subjects[0].values == (1.0, 2.0, 0.0, 4.0)
    assert subjects[1].values == (5.0, 0.0, 0.0, 0.0)


def test_detect_mismatch_uses_widest_row():
    compiled = compile_schema(uniform_schema(2, 2))
    assert detect_mismatch([["a", "b", "c", "d"], [1, 2, 3, 4]], compiled) is None
    mismatch = detect_mismatch([["a", "b", "c"], [1, 2, 3, 4, 5]], compiled)
    assert (mismatch.detected_columns, mismatch.expected_columns) == (5, 4)


def test_uniform_schema_names_dimensions():
    schema = uniform_schema(3, 4)
    variable = schema.variables[0]
    assert variable.name == "Main variable"
    assert [d.name for d in variable.dimensions] == ["D1", "D2", "D3"]
    assert variable.item_count == 12


def test_negative_item_count_rejected():
    with pytest.raises(ValueError):
        Dimension(name="X", item_count=-1)
