"""Tests for table rendering."""

import io

from xml2csv.shared import RenderConfig
from xml2csv.table import ColumnNamer, FinalColumnSet, Table, TableRenderer, normalize_content
from xml2csv.tokenization import XMLTokenizer
from xml2csv.tree import XMLTreeBuilder


def render(data: bytes, config: RenderConfig = None) -> Table:
    root = XMLTreeBuilder().build(XMLTokenizer().tokenize(data), data).root
    naming = ColumnNamer().assign(root)
    return TableRenderer(config).render(root, naming.final)


class TestFormatting:
    """Test field and line formatting."""

    def test_quote_doubles_quote_characters(self):
        """Test embedded quotes are doubled and empty fields stay quoted."""
        table = Table(columns=["a", "b"], rows=[['say "hi"', ""]])
        assert TableRenderer().to_text(table) == 'a,b\n"say ""hi""",""\n'

    def test_header_is_unquoted(self):
        """Test header names are joined as-is."""
        assert TableRenderer().format_header(["a", "b_c"]) == "a,b_c"

    def test_row_fields_are_quoted(self):
        """Test every row field is quoted, including delimiters and line breaks."""
        table = Table(columns=["a", "b", "c"], rows=[["1", "x,y", "p\nq"]])
        assert TableRenderer().to_text(table) == 'a,b,c\n"1","x,y","p\nq"\n'

    def test_custom_delimiter_and_quote(self):
        """Test render configuration is honoured."""
        renderer = TableRenderer(RenderConfig(delimiter="\t", quote_char="'"))
        table = Table(columns=["a", "b"], rows=[["it's", "b"]])
        assert renderer.to_text(table) == "a\tb\n'it''s'\t'b'\n"

    def test_normalize_content(self):
        """Test whitespace-only values become empty, others stay verbatim."""
        assert normalize_content(" \n\t") == ""
        assert normalize_content(" v ") == " v "


class TestRender:
    """Test rendering whole documents."""

    def test_two_records(self):
        """Test one row per record in document order."""
        table = render(b"<r><x><a>1</a><b>x</b></x><x><a>2</a><b>y</b></x></r>")

        assert table.columns == ["a", "b"]
        assert table.rows == [["1", "x"], ["2", "y"]]
        assert table.row_count == 2
        assert table.column_count == 2

    def test_unset_fields_are_empty(self):
        """Test a record missing a column gets an empty field."""
        table = render(b"<r><x><a>1</a><b>x</b></x><x><a>2</a></x></r>")
        assert table.rows == [["1", "x"], ["2", ""]]

    def test_record_without_columns_still_emits_row(self):
        """Test every record produces exactly one row."""
        table = render(b"<r><x><a>1</a></x><y><q>5</q></y></r>")
        assert table.columns == ["a", "q"]
        assert table.rows == [["1", ""], ["", "5"]]

    def test_leaf_record(self):
        """Test a record that is itself a leaf fills its own column."""
        table = render(b"<r><x>1</x><x>2</x></r>")
        assert table.columns == ["x"]
        assert table.rows == [["1"], ["2"]]

    def test_columns_not_in_final_set_are_ignored(self):
        """Test leaves outside the final column set are not rendered."""
        data = b"<r><x><a>1</a><b>2</b></x></r>"
        root = XMLTreeBuilder().build(XMLTokenizer().tokenize(data), data).root
        ColumnNamer().assign(root)

        table = TableRenderer().render(root, FinalColumnSet.from_names(["b"]))

        assert table.rows == [["2"]]

    def test_empty_document(self):
        """Test no root gives an empty table."""
        table = TableRenderer().render(None, FinalColumnSet())
        assert table.columns == []
        assert table.rows == []

    def test_records_helper(self):
        """Test rows as mappings."""
        table = render(b"<r><x><a>1</a><b>x</b></x></r>")
        assert table.records() == [{"a": "1", "b": "x"}]


class TestOutput:
    """Test textual output."""

    def test_to_text(self):
        """Test header plus terminated rows."""
        table = render(b"<r><x><a>1</a><b>x</b></x><x><a>2</a><b>y</b></x></r>")
        assert TableRenderer().to_text(table) == 'a,b\n"1","x"\n"2","y"\n'

    def test_write_to_stream(self):
        """Test writing line by line with a custom terminator."""
        table = Table(columns=["a"], rows=[["1"], ['q"']])
        stream = io.StringIO()

        written = TableRenderer(RenderConfig(line_terminator="\r\n")).write(table, stream)

        assert written == 3
        assert stream.getvalue() == 'a\r\n"1"\r\n"q"""\r\n'

