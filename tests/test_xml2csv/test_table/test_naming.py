"""Tests for column naming."""

from xml2csv.shared import NamingConfig
from xml2csv.table import ColumnNamer, ColumnTable, FinalColumnSet
from xml2csv.tokenization import XMLTokenizer
from xml2csv.tree import XMLTreeBuilder, iter_subtree


def build_root(data: bytes):
    return XMLTreeBuilder().build(XMLTokenizer().tokenize(data), data).root


def leaf_columns(root):
    return [(n.name, n.column_name) for n in iter_subtree(root) if n.is_leaf]


class TestColumnTable:
    """Test first-seen column bookkeeping."""

    def test_add_is_idempotent(self):
        """Test re-adding a name returns its original slot."""
        table = ColumnTable()
        assert table.add("a") == 0
        assert table.add("b") == 1
        assert table.add("a") == 0
        assert table.names == ["a", "b"]
        assert "b" in table
        assert len(table) == 2


class TestFinalColumnSet:
    """Test the sorted header set."""

    def test_from_names_sorts(self):
        """Test names are sorted and indexed."""
        final = FinalColumnSet.from_names(["b", "a_c", "a"])
        assert list(final) == ["a", "a_c", "b"]
        assert final.index == {"a": 0, "a_c": 1, "b": 2}


class TestColumnNamer:
    """Test path-derived naming."""

    def test_record_level_does_not_contribute(self):
        """Test leaves directly under records use their own name."""
        root = build_root(b"<r><x><a>1</a><b>x</b></x><x><a>2</a><b>y</b></x></r>")
        result = ColumnNamer().assign(root)

        assert result.columns.names == ["a", "b"]
        assert result.final.names == ["a", "b"]

    def test_nested_path_is_joined(self):
        """Test container names prefix leaf names."""
        root = build_root(b"<r><x><addr><city>A</city><geo><lat>1</lat></geo></addr></x></r>")
        result = ColumnNamer().assign(root)

        assert result.columns.names == ["addr_city", "addr_geo_lat"]

    def test_repeated_siblings_get_suffixes(self):
        """Test the first repeat is unsuffixed, then 1, 2, ..."""
        root = build_root(b"<r><x><p>1</p><p>2</p><p>3</p></x></r>")
        result = ColumnNamer().assign(root)

        assert result.columns.names == ["p", "p1", "p2"]
        assert [n.duplicate_index for n in iter_subtree(root) if n.name == "p"] == [0, 1, 2]

    def test_repeated_containers_suffix_their_subtree(self):
        """Test suffixed containers carry the suffix into child paths."""
        root = build_root(
            b"<r><x><addr><city>A</city></addr><addr><city>B</city></addr></x></r>"
        )
        result = ColumnNamer().assign(root)

        assert result.columns.names == ["addr_city", "addr1_city"]

    def test_counters_are_per_parent(self):
        """Test the same name under different parents is not suffixed."""
        root = build_root(
            b"<r><x><a><v>1</v></a><b><v>2</v></b></x><x><a><v>3</v></a></x></r>"
        )
        result = ColumnNamer().assign(root)

        assert result.columns.names == ["a_v", "b_v"]

    def test_records_are_not_suffixed(self):
        """Test repeated records share column names."""
        root = build_root(b"<r><x><a>1</a></x><x><a>2</a></x></r>")
        assert ColumnNamer().assign(root).columns.names == ["a"]

    def test_namespace_is_stripped(self):
        """Test namespace prefixes do not appear in column names."""
        root = build_root(b"<r><x><dc:a><dc:b>1</dc:b></dc:a></x></r>")
        assert ColumnNamer().assign(root).columns.names == ["a_b"]

    def test_custom_separator(self):
        """Test the path separator is configurable."""
        root = build_root(b"<r><x><a><b>1</b></a></x></r>")
        result = ColumnNamer(NamingConfig(separator=".")).assign(root)
        assert result.columns.names == ["a.b"]

    def test_skipped_tags_are_not_named(self):
        """Test skipped tags and their subtrees produce no columns."""
        root = build_root(
            b"<r><x><schema:created>2020</schema:created>"
            b"<schema:modified><d>1</d></schema:modified><a>1</a></x></r>"
        )
        result = ColumnNamer().assign(root)

        assert result.columns.names == ["a"]
        assert ("schema:created", None) in leaf_columns(root)
        assert ("d", None) in leaf_columns(root)

    def test_skipped_tags_do_not_consume_suffixes(self):
        """Test skipping leaves sibling counters untouched."""
        root = build_root(b"<r><x><schema:created>1</schema:created><a>1</a><a>2</a></x></r>")
        assert ColumnNamer().assign(root).columns.names == ["a", "a1"]

    def test_leaf_record_is_its_own_column(self):
        """Test a record with no children yields a column named after it."""
        root = build_root(b"<r><x>1</x><x>2</x></r>")
        result = ColumnNamer().assign(root)
        assert result.columns.names == ["x"]

    def test_discarded_columns_need_every_leaf_discarded(self):
        """Test a column survives if any of its leaves is informative."""
        root = build_root(b"<r><x><a>1</a><b>2</b></x><x><a>3</a><b>4</b></x></r>")
        leaves = [n for n in iter_subtree(root) if n.name == "a"]
        leaves[0].discard = True
        for node in iter_subtree(root):
            if node.name == "b":
                node.discard = True

        result = ColumnNamer().assign(root)

        assert result.final.names == ["a"]
        assert result.discarded_columns == ["b"]

    def test_namespace_collision_is_reported(self):
        """Test distinct qualified names resolving to one column."""
        root = build_root(b"<r><x><a:note>1</a:note><b:note>2</b:note></x></r>")
        result = ColumnNamer().assign(root)

        assert result.columns.names == ["note"]
        assert len(result.collisions) == 1
        assert result.collisions[0].column == "note"
        assert result.collisions[0].tag_names == ["a:note", "b:note"]

    def test_assign_is_idempotent(self):
        """Test naming the same tree twice gives the same names."""
        root = build_root(b"<r><x><p>1</p><p>2</p></x></r>")
        namer = ColumnNamer()
        first = namer.assign(root)
        second = namer.assign(root)

        assert first.columns.names == second.columns.names == ["p", "p1"]

    def test_final_columns_are_sorted(self):
        """Test the header is sorted, not first-seen."""
        root = build_root(b"<r><x><z>1</z><a>2</a><m>3</m></x></r>")
        result = ColumnNamer().assign(root)

        assert result.columns.names == ["z", "a", "m"]
        assert result.final.names == ["a", "m", "z"]

    def test_empty_document(self):
        """Test documents without records produce no columns."""
        assert len(ColumnNamer().assign(None).final) == 0
        assert len(ColumnNamer().assign(build_root(b"<r/>")).columns) == 0
