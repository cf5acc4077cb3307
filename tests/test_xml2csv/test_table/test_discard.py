"""Tests for the discard heuristic."""

from xml2csv.shared import DiscardPolicy
from xml2csv.table import DiscardAnalyzer
from xml2csv.tokenization import XMLTokenizer
from xml2csv.tree import ContentStats, XMLTreeBuilder, iter_subtree


def stats_of(**values):
    stats = ContentStats()
    for name, contents in values.items():
        for content in contents:
            stats.record(name, content)
    return stats


class TestIsUninformative:
    """Test the per-name decision."""

    def test_empty_set_is_uninformative(self):
        """Test a name with no observed values is discarded."""
        assert DiscardAnalyzer().is_uninformative(frozenset())

    def test_only_placeholder_values(self):
        """Test names carrying only '' or 'None' are discarded."""
        analyzer = DiscardAnalyzer()
        assert analyzer.is_uninformative(frozenset({""}))
        assert analyzer.is_uninformative(frozenset({"None"}))
        assert analyzer.is_uninformative(frozenset({"", "None"}))

    def test_single_real_value_is_kept(self):
        """Test a constant real value still counts as information."""
        analyzer = DiscardAnalyzer()
        assert not analyzer.is_uninformative(frozenset({"x"}))
        assert not analyzer.is_uninformative(frozenset({"", "x"}))

    def test_more_than_two_values_are_kept(self):
        """Test names with many distinct values are always kept."""
        assert not DiscardAnalyzer().is_uninformative(frozenset({"", "None", "x"}))

    def test_custom_policy(self):
        """Test thresholds and placeholder values are configurable."""
        policy = DiscardPolicy(max_distinct_values=3, uninformative_values=("", "N/A", "-"))
        analyzer = DiscardAnalyzer(policy)
        assert analyzer.is_uninformative(frozenset({"", "N/A", "-"}))
        assert not analyzer.is_uninformative(frozenset({"None"}))


class TestAnalyze:
    """Test analysis over collected statistics."""

    def test_analyze(self):
        """Test names are selected from content statistics."""
        stats = stats_of(a=["1", "2"], note=["", "None", " "], flag=["None"])
        assert DiscardAnalyzer().analyze(stats) == {"note", "flag"}

    def test_whitespace_is_trimmed_before_analysis(self):
        """Test whitespace-only content counts as empty."""
        stats = stats_of(note=["  ", "\n\t"])
        assert DiscardAnalyzer().analyze(stats) == {"note"}

    def test_disabled_policy_discards_nothing(self):
        """Test discard can be switched off."""
        stats = stats_of(note=[""])
        assert DiscardAnalyzer(DiscardPolicy(enabled=False)).analyze(stats) == set()


class TestMark:
    """Test flagging of leaves."""

    def test_mark_flags_leaves_by_qualified_name(self):
        """Test only leaves with a discarded name are flagged."""
        data = b"<r><x><a>1</a><n:note/></x><x><a>2</a><n:note>None</n:note></x></r>"
        result = XMLTreeBuilder().build(XMLTokenizer().tokenize(data), data)
        analyzer = DiscardAnalyzer()

        names = analyzer.analyze(result.stats)
        marked = analyzer.mark(result.root, names)

        assert names == {"n:note"}
        assert marked == 2
        flagged = [n.name for n in iter_subtree(result.root) if n.discard]
        assert flagged == ["n:note", "n:note"]

    def test_mark_without_root(self):
        """Test marking an empty document."""
        assert DiscardAnalyzer().mark(None, {"a"}) == 0
