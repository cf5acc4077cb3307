"""Exception hierarchy for xml2csv.

Malformed input is always fatal: the pipeline never repairs structure, it
reports where the document stopped making sense and stops.
"""

from typing import List, Optional


class XML2CSVError(Exception):
    """Base exception for all conversion failures."""


class InputReadError(XML2CSVError):
    """Raised when the input document cannot be read."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


class StructuralError(XML2CSVError):
    """Raised when the markup does not form a balanced element tree.

    Attributes:
        offset: Byte offset in the input buffer, when known
        token_index: Index of the offending token, when known
        excerpt: Bounded excerpt of the input around the failure point
    """

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        token_index: Optional[int] = None,
        excerpt: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.offset = offset
        self.token_index = token_index
        self.excerpt = excerpt


class UnterminatedTagError(StructuralError):
    """An opening ``<`` has no ``>`` before the next ``<`` or end of input."""

    def __init__(self, offset: int, excerpt: str) -> None:
        super().__init__(
            f"unterminated tag at byte offset {offset}: {excerpt!r}",
            offset=offset,
            excerpt=excerpt,
        )


class MismatchedCloseError(StructuralError):
    """A closing tag does not match the currently open element."""

    def __init__(
        self,
        expected: str,
        found: str,
        token_index: int,
        offset: Optional[int] = None,
    ) -> None:
        super().__init__(
            f"closing tag '{found}' does not match open element '{expected}' "
            f"(token {token_index}, byte offset {offset})",
            offset=offset,
            token_index=token_index,
        )
        self.expected = expected
        self.found = found


class UnexpectedTagError(StructuralError):
    """A tag appears where no element can accept it."""

    def __init__(self, name: str, token_index: int, offset: int, reason: str) -> None:
        super().__init__(
            f"unexpected tag '{name}' at token {token_index} "
            f"(byte offset {offset}): {reason}",
            offset=offset,
            token_index=token_index,
        )
        self.name = name


class UnclosedTagError(StructuralError):
    """End of input reached while elements are still open."""

    def __init__(self, open_names: List[str], offset: Optional[int] = None) -> None:
        super().__init__(
            "end of input with unclosed elements: " + " > ".join(open_names),
            offset=offset,
        )
        self.open_names = list(open_names)
