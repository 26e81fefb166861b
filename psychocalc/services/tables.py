"""Turn engine results into localized export tables.

Each builder returns an :class:`ExportTable` (title, headers, rows, file
name) that the spreadsheet, PDF and APA writers consume unchanged. Result
codes such as verdicts and reliability bands are translated here, at the
edge, so the engines stay locale-free.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Tuple

from psychocalc.calculators.aiken import AikenReport
from psychocalc.calculators.baremos import DEFAULT_LEVEL_TEMPLATE, BaremoTable
from psychocalc.calculators.cronbach import CronbachResult, CronbachRow
from psychocalc.calculators.recode import RawTable
from psychocalc.calculators.survey import SurveySummary
from psychocalc.core.formatting import format_fixed
from psychocalc.i18n import get_i18n_resource, translate

__all__ = [
    "ExportTable",
    "aiken_table",
    "cronbach_table",
    "baremo_table",
    "survey_table",
    "recode_table",
    "apa_labels",
    "level_labels",
]


@dataclass(frozen=True, slots=True)
class ExportTable:
    title: str
    headers: Tuple[Any, ...]
    rows: Tuple[Tuple[Any, ...], ...]
    filename: str
    sheet_name: str = "Sheet1"


def _header(code: str, locale: str) -> str:
    return translate("headers", code, locale)


def _title(tool: str, locale: str) -> str:
    return translate("titles", tool, locale)


def _filename(key: str, locale: str) -> str:
    return translate("files", key, locale)


def apa_labels(locale: str) -> Tuple[str, str]:
    """Return ``(caption, note)`` for APA fragments in ``locale``."""

    apa = get_i18n_resource("labels", locale).get("apa", {})
    return apa.get("caption", "Table 1"), apa.get("note", "Note.")


def level_labels(table: BaremoTable, locale: str) -> Tuple[str, ...]:
    """Localize generated level labels; names the caller chose are kept verbatim."""

    generated = table.generated or (False,) * len(table.level_names)
    labels = []
    for i, (name, is_generated) in enumerate(zip(table.level_names, generated)):
        if not is_generated:
            labels.append(name)
        elif name == DEFAULT_LEVEL_TEMPLATE.format(n=i + 1):
            labels.append(translate("levels", DEFAULT_LEVEL_TEMPLATE, locale).format(n=i + 1))
        else:
            labels.append(translate("levels", name, locale))
    return tuple(labels)


def aiken_table(report: AikenReport, locale: str) -> ExportTable:
    return ExportTable(
        title=_title("aiken", locale),
        headers=(_header("Item", locale), _header("V coefficient", locale), _header("Verdict", locale)),
        rows=tuple(
            (item.item_index, item.v_display, translate("verdicts", item.verdict.value, locale))
            for item in report.items
        ),
        filename=_filename("aiken_pdf", locale),
        sheet_name="Aiken",
    )


def cronbach_table(results: Sequence[CronbachRow], locale: str) -> ExportTable:
    """Error rows keep their place and show the error message instead of alpha."""

    rows = []
    for result in results:
        if isinstance(result, CronbachResult):
            rows.append(
                (
                    result.label,
                    result.n_items,
                    format_fixed(result.alpha, decimals=3),
                    translate("alpha_bands", result.interpretation, locale),
                )
            )
        else:
            rows.append((result.label, "", result.error, ""))
    return ExportTable(
        title=_title("cronbach", locale),
        headers=(
            _header("Variable", locale),
            _header("Items", locale),
            _header("Alpha", locale),
            _header("Interpretation", locale),
        ),
        rows=tuple(rows),
        filename=_filename("cronbach_pdf", locale),
        sheet_name="Cronbach",
    )


def baremo_table(table: BaremoTable, locale: str) -> ExportTable:
    """The APA title joins the variable names with ``" & "``."""

    variables = []
    for row in table.rows:
        if row.variable not in variables:
            variables.append(row.variable)
    return ExportTable(
        title=" & ".join(variables) or _title("ranges", locale),
        headers=(
            _header("Component", locale),
            *level_labels(table, locale),
        ),
        rows=tuple(tuple(cells) for cells in table.as_rows()),
        filename=_filename("ranges_xlsx", locale),
        sheet_name=_title("ranges", locale),
    )


def survey_table(summary: SurveySummary, locale: str) -> ExportTable:
    headers = list(summary.headers)
    if headers:
        headers[0] = _header(headers[0], locale)
    return ExportTable(
        title=_title("survey", locale),
        headers=tuple(headers),
        rows=tuple(tuple(cells) for cells in summary.as_rows()),
        filename=_filename("survey_xlsx", locale),
        sheet_name=_title("survey", locale),
    )


def recode_table(table: RawTable, locale: str) -> ExportTable:
    return ExportTable(
        title=_title("recode", locale),
        headers=table.headers,
        rows=table.rows,
        filename=_filename("recode_xlsx", locale),
        sheet_name=_title("recode", locale),
    )
