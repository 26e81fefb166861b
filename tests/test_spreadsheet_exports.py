import pytest

from psychocalc.core.errors import ImportFormatError
from psychocalc.core.metrics import get_counters
from psychocalc.services.exports import apa_table_html, build_pdf_report, write_rich_text
from psychocalc.services.spreadsheet import detect_delimiter, read_table, write_table


@pytest.mark.parametrize(
    "line, expected",
    [("a\tb;c", "\t"), ("a;b,c", ";"), ("a,b", ","), ("single", ",")],
)
def test_delimiter_precedence(line, expected):
    assert detect_delimiter(line) == expected


def test_csv_with_bom_and_semicolons():
    content = "\ufeffSujeto;P1;P2\nAna;1;2\n;;\n".encode("utf-8")
    assert read_table(content, "datos.csv") == [["Sujeto", "P1", "P2"], ["Ana", "1", "2"]]


def test_tab_separated_text_file():
    content = b"P1\tP2\t\n4\t5\t\n"
    assert read_table(content, "datos.TXT") == [["P1", "P2"], ["4", "5"]]


def test_latin1_fallback():
    content = "Ítem,V\n1,0.8\n".encode("latin-1")
    assert read_table(content, "v.csv")[0] == ["Ítem", "V"]


def test_xlsx_round_trip():
    payload = write_table(["Item", "V"], [[1, 0.833], [2, None]], sheet_name="Resultados")
    assert payload[:2] == b"PK"
    assert read_table(payload, "resultados.xlsx") == [["Item", "V"], [1, 0.833], [2]]
    assert get_counters()["exports.xlsx"] == 1.0


@pytest.mark.parametrize(
    "content, filename",
    [(b"1,2", "notes.docx"), (b"", "empty.csv"), (b"\n\n", "blank.csv"), (b"not a zip", "broken.xlsx")],
)
def test_unreadable_inputs_are_rejected(content, filename):
    with pytest.raises(ImportFormatError):
        read_table(content, filename)


def test_pdf_report_bytes():
    payload = build_pdf_report("Resultados", ["Ítem", "V"], [[1, "0.833"], [2, 1.0]], subtitle="Umbral 0.70")
    assert payload.startswith(b"%PDF")
    assert get_counters()["exports.pdf"] == 1.0


def test_apa_fragment_layout_and_escaping():
    fragment = apa_table_html("V <Aiken>", ["Ítem", "V"], [[1, "0.833"], [2, 1.0]], caption="Tabla 2")

    assert "<caption>Tabla 2</caption>" in fragment
    assert '<th colspan="2" class="title">V &lt;Aiken&gt;</th>' in fragment
    assert "<tr><td>2</td><td>1</td></tr>" in fragment
    assert "border-top: 2px solid black" in fragment
    assert 'class="note">Nota.</td>' in fragment


def test_apa_fragment_without_note():
    fragment = apa_table_html("Baremos", ["Componente"], [["D1"]], note=None)
    assert "<tfoot>" not in fragment


class _Recorder:
    def __init__(self):
        self.calls = []

    def write(self, html_fragment, plain_text):
        self.calls.append((html_fragment, plain_text))


class _Broken:
    def write(self, html_fragment, plain_text):
        raise RuntimeError("clipboard locked")


def test_rich_text_writer_receives_both_renditions():
    writer = _Recorder()
    assert write_rich_text("<table></table>", writer, headers=["A", "B"], rows=[[1, 2.0]])
    assert writer.calls == [("<table></table>", "A\tB\n1\t2")]


def test_rich_text_failure_returns_false():
    assert write_rich_text("<table></table>", _Broken()) is False
    assert get_counters()["exports.rich_text.failed"] == 1.0
