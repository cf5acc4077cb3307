"""Tests for the markup tokenizer."""

import pytest

from xml2csv.shared import TokenizerConfig, UnterminatedTagError
from xml2csv.tokenization import Token, XMLTokenizer, strip_namespace


def tokenize(data: bytes):
    return XMLTokenizer().tokenize(data).tokens


class TestToken:
    """Test Token value object."""

    def test_offsets_are_validated(self):
        """Test empty or negative spans are rejected."""
        with pytest.raises(ValueError, match="end must be greater"):
            Token(raw="", name="", display_name="", start=5, end=5)
        with pytest.raises(ValueError, match="start must be"):
            Token(raw="<a>", name="a", display_name="a", start=-1, end=2)

    def test_token_is_immutable(self):
        """Test tokens are frozen."""
        token = Token(raw="<a>", name="a", display_name="a", start=0, end=3)
        with pytest.raises(AttributeError):
            token.name = "b"  # type: ignore[misc]

    def test_closes(self):
        """Test matching of close tags by qualified name."""
        opening = Token(raw="<ns:a>", name="ns:a", display_name="a", start=0, end=6)
        closing = Token(raw="</ns:a>", name="ns:a", display_name="a",
                        start=7, end=14, is_closing=True)
        other = Token(raw="</b:a>", name="b:a", display_name="a",
                      start=7, end=13, is_closing=True)
        assert closing.closes(opening)
        assert not other.closes(opening)
        assert not opening.closes(opening)


class TestStripNamespace:
    """Test namespace stripping."""

    def test_strip(self):
        """Test only the first prefix is removed."""
        assert strip_namespace("a") == "a"
        assert strip_namespace("ns:a") == "a"
        assert strip_namespace("a:b:c") == "b:c"


class TestXMLTokenizer:
    """Test tokenization of byte buffers."""

    def test_simple_element(self):
        """Test open and close tags with offsets."""
        tokens = tokenize(b"<r><a>1</a></r>")

        assert [t.name for t in tokens] == ["r", "a", "a", "r"]
        assert [t.is_closing for t in tokens] == [False, False, True, True]
        assert (tokens[1].start, tokens[1].end) == (3, 6)
        assert tokens[2].raw == "</a>"

    def test_text_is_not_tokenized(self):
        """Test text between tags produces no tokens."""
        result = XMLTokenizer().tokenize(b"lead <a> text </a> tail")
        assert result.token_count == 2
        assert result.closing_count == 1
        assert result.byte_count == 23

    def test_attributes_are_not_part_of_name(self):
        """Test name ends at the first whitespace byte."""
        tokens = tokenize(b'<a x="1"><b\n y="2"\t></b></a>')
        assert [t.name for t in tokens] == ["a", "b", "b", "a"]

    def test_self_closing(self):
        """Test self-closing tags with and without whitespace."""
        tokens = tokenize(b"<r><br/><hr /><img src='x'/></r>")
        names = [(t.name, t.is_self_closing) for t in tokens[1:4]]
        assert names == [("br", True), ("hr", True), ("img", True)]
        assert tokens[1].is_opening is False

    def test_namespace_display_name(self):
        """Test display name drops the prefix, name keeps it."""
        token = tokenize(b"<dc:title>")[0]
        assert token.name == "dc:title"
        assert token.display_name == "title"

    def test_declaration_is_flagged(self):
        """Test XML declarations are recognised."""
        tokens = tokenize(b'<?xml version="1.0"?><r/>')
        assert tokens[0].is_declaration is True
        assert tokens[0].is_self_closing is False
        assert tokens[1].is_declaration is False

    def test_unterminated_tag_before_next_tag(self):
        """Test a '<' followed by another '<' before any '>'."""
        with pytest.raises(UnterminatedTagError) as exc_info:
            tokenize(b"<r><a b=1</r>")
        assert exc_info.value.offset == 3
        assert exc_info.value.excerpt.startswith("<a b=1")

    def test_unterminated_tag_at_end_of_input(self):
        """Test a '<' with no '>' at all."""
        with pytest.raises(UnterminatedTagError) as exc_info:
            tokenize(b"<r>abc<a b=1")
        assert exc_info.value.offset == 6
        assert "byte offset 6" in str(exc_info.value)

    def test_excerpt_is_bounded(self):
        """Test the excerpt length follows configuration."""
        tokenizer = XMLTokenizer(TokenizerConfig(excerpt_length=5))
        with pytest.raises(UnterminatedTagError) as exc_info:
            tokenizer.tokenize(b"<r><a b=1 c=2</r>")
        assert exc_info.value.excerpt == "<a b="

    def test_empty_input(self):
        """Test empty buffers produce no tokens."""
        assert XMLTokenizer().tokenize(b"").tokens == []
