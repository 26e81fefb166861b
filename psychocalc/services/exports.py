"""Document and rich-text exports for result tables.

Two output shapes are produced from the same ``(title, headers, rows)``
triple:

- a PDF report built with reportlab, returned as bytes;
- a citation-style (APA 7) HTML table fragment meant for pasting into a word
  processor: caption above, italic title row, heavy top and bottom rules,
  a thin rule under the column headers and no internal borders.

Both are built fully in memory so a failure never leaves a partial file.
"""

from __future__ import annotations

import html
import io
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from psychocalc.core.errors import ExportError
from psychocalc.core.formatting import format_cell
from psychocalc.core.logging import get_logger
from psychocalc.core.metrics import inc_counter, timer

__all__ = [
    "PDF_MEDIA_TYPE",
    "RichTextWriter",
    "build_pdf_report",
    "apa_table_html",
    "write_rich_text",
]

logger = get_logger("psychocalc.services.exports", component="io")

PDF_MEDIA_TYPE = "application/pdf"

_APA_STYLE = """<style>
table { border-collapse: collapse; width: 100%; font-family: "Times New Roman", serif; font-size: 10pt; border-top: 2px solid black; border-bottom: 2px solid black; }
th, td { border: 0; padding: 8px; text-align: left; }
thead th { border-bottom: 1px solid black; }
caption { caption-side: top; font-weight: bold; text-align: left; padding-bottom: 5px; }
.title { font-style: italic; }
.note { text-align: left; font-size: 8pt; }
</style>"""


@runtime_checkable
class RichTextWriter(Protocol):
    """Destination for an HTML fragment, e.g. a system clipboard bridge."""

    def write(self, html_fragment: str, plain_text: str) -> None:
        ...


def build_pdf_report(
    title: str,
    headers: Sequence[Any],
    rows: Sequence[Sequence[Any]],
    *,
    subtitle: Optional[str] = None,
) -> bytes:
    """Render a titled single-table PDF.

    Raises:
        ExportError: when reportlab cannot lay out or write the document.
    """
    data = [[format_cell(cell) for cell in headers]]
    data.extend([format_cell(cell) for cell in row] for row in rows)

    buffer = io.BytesIO()
    try:
        with timer("io.write.pdf"):
            doc = SimpleDocTemplate(
                buffer,
                pagesize=A4,
                leftMargin=2 * cm,
                rightMargin=2 * cm,
                topMargin=2 * cm,
                bottomMargin=2 * cm,
                title=title,
            )
            styles = getSampleStyleSheet()
            story = [Paragraph(html.escape(title), styles["Heading2"])]
            if subtitle:
                story.append(Paragraph(f"<i>{html.escape(subtitle)}</i>", styles["Normal"]))
            story.append(Spacer(1, 0.4 * cm))
            table = Table(data, repeatRows=1)
            table.setStyle(
                TableStyle(
                    [
                        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2980b9")),
                        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                        ("FONTSIZE", (0, 0), (-1, -1), 9),
                        ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f5f5f5")]),
                        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ]
                )
            )
            story.append(table)
            doc.build(story)
    except (ValueError, TypeError, OSError) as exc:
        logger.error("export_failed", extra={"structured_data": {"format": "pdf", "error": str(exc)}})
        raise ExportError(detail={"format": "pdf", "reason": str(exc)}) from exc
    inc_counter("exports.pdf")
    return buffer.getvalue()


def apa_table_html(
    title: str,
    headers: Sequence[Any],
    rows: Sequence[Sequence[Any]],
    *,
    caption: str = "Tabla 1",
    note: Optional[str] = "Nota.",
) -> str:
    """Build the APA 7 table fragment; every cell is HTML-escaped.

    Example:
        >>> fragment = apa_table_html("Results", ["Item", "V"], [[1, "0.833"]])
        >>> "<caption>Tabla 1</caption>" in fragment
        True
    """
    span = max(len(headers), 1)

    def _cell(tag: str, value: Any) -> str:
        return f"<{tag}>{html.escape(format_cell(value))}</{tag}>"

    parts = [
        _APA_STYLE,
        "<table>",
        f"<caption>{html.escape(caption)}</caption>",
        "<thead>",
        f'<tr><th colspan="{span}" class="title">{html.escape(title)}</th></tr>',
        "<tr>" + "".join(_cell("th", header) for header in headers) + "</tr>",
        "</thead>",
        "<tbody>",
    ]
    parts.extend("<tr>" + "".join(_cell("td", cell) for cell in row) + "</tr>" for row in rows)
    parts.append("</tbody>")
    if note:
        parts.append(f'<tfoot><tr><td colspan="{span}" class="note">{html.escape(note)}</td></tr></tfoot>')
    parts.append("</table>")
    inc_counter("exports.apa")
    return "\n".join(parts)


def _plain_text(headers: Sequence[Any], rows: Sequence[Sequence[Any]]) -> str:
    lines = ["\t".join(format_cell(cell) for cell in headers)]
    lines.extend("\t".join(format_cell(cell) for cell in row) for row in rows)
    return "\n".join(lines)


def write_rich_text(
    html_fragment: str,
    writer: RichTextWriter,
    *,
    headers: Sequence[Any] = (),
    rows: Sequence[Sequence[Any]] = (),
) -> bool:
    """Hand the fragment to ``writer``; returns False (and logs) on failure.

    A tab-separated plain-text rendition of ``headers``/``rows`` travels
    alongside for destinations that cannot accept HTML.
    """
    try:
        writer.write(html_fragment, _plain_text(headers, rows))
    except Exception as exc:  # writer implementations are external
        inc_counter("exports.rich_text.failed")
        logger.warning("rich_text_write_failed", extra={"structured_data": {"error": str(exc)}})
        return False
    inc_counter("exports.rich_text.total")
    return True
