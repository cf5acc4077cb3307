"""Markup tokenization.

This module scans a byte buffer into a flat, ordered sequence of tag tokens,
one per ``<...>`` span. Text between tags is not tokenized; the tree builder
slices it out of the buffer using token offsets.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from xml2csv.shared import TokenizerConfig, UnterminatedTagError, get_logger

_LT = ord("<")
_GT = ord(">")
_SLASH = ord("/")


def strip_namespace(name: str) -> str:
    """Drop a ``prefix:`` namespace qualifier from a tag name."""
    if ":" not in name:
        return name
    return name.split(":", 1)[1]


@dataclass(frozen=True)
class Token:
    """One ``<...>`` span of the input.

    Attributes:
        raw: Complete text between and including the angle brackets
        name: Namespace-qualified tag name, used for open/close matching
        display_name: Tag name with any namespace prefix removed
        start: Byte offset of ``<``
        end: Byte offset one past ``>``
        is_closing: The span starts with ``</``
        is_self_closing: The span ends with ``/>``
        is_declaration: The span is an XML declaration
    """

    raw: str
    name: str
    display_name: str
    start: int
    end: int
    is_closing: bool = False
    is_self_closing: bool = False
    is_declaration: bool = False

    def __post_init__(self) -> None:
        """Validate token offsets."""
        if self.start < 0:
            raise ValueError("Token start must be >= 0")
        if self.end <= self.start:
            raise ValueError("Token end must be greater than start")

    @property
    def is_opening(self) -> bool:
        """Opening tag that expects a matching close."""
        return not (self.is_closing or self.is_self_closing or self.is_declaration)

    def closes(self, other: "Token") -> bool:
        """Check whether this token is the close tag for ``other``."""
        return self.is_closing and self.name == other.name


@dataclass
class TokenizationResult:
    """Result of tokenizing one buffer."""

    tokens: List[Token] = field(default_factory=list)
    byte_count: int = 0
    processing_time_ms: float = 0.0

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    @property
    def closing_count(self) -> int:
        """Number of closing tokens."""
        return sum(1 for token in self.tokens if token.is_closing)


class XMLTokenizer:
    """Splits a byte buffer into tag tokens.

    The scan is two-pointer: find the next ``<``, then require a ``>``
    before the following ``<``. Anything else is an unterminated tag.
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tokenizer")
        self._declaration_prefix = self.config.declaration_prefix.encode("ascii")

    def tokenize(self, data: bytes, encoding: str = "utf-8") -> TokenizationResult:
        """Tokenize ``data`` into tag tokens in document order.

        Args:
            data: Complete document bytes in an ASCII-compatible encoding
            encoding: Encoding used to decode tag text

        Returns:
            TokenizationResult with tokens and timing

        Raises:
            UnterminatedTagError: A ``<`` has no ``>`` before the next ``<``
        """
        start_time = time.time()
        self.logger.debug("Starting tokenization", extra={"byte_count": len(data)})

        tokens: List[Token] = []
        pos = 0
        size = len(data)
        while pos < size:
            lt = data.find(b"<", pos)
            if lt == -1:
                break
            gt = data.find(b">", lt + 1)
            next_lt = data.find(b"<", lt + 1)
            if gt == -1 or (next_lt != -1 and next_lt < gt):
                excerpt = data[lt:lt + self.config.excerpt_length]
                self.logger.error(
                    "Unterminated tag",
                    extra={"offset": lt, "token_count": len(tokens)}
                )
                raise UnterminatedTagError(
                    lt, excerpt.decode(encoding, errors="replace")
                )

            tokens.append(self._make_token(data, lt, gt, encoding))
            pos = gt + 1

        result = TokenizationResult(
            tokens=tokens,
            byte_count=size,
            processing_time_ms=(time.time() - start_time) * 1000,
        )
        self.logger.debug(
            "Tokenization completed",
            extra={
                "token_count": result.token_count,
                "processing_time_ms": result.processing_time_ms,
            }
        )
        return result

    def _make_token(self, data: bytes, lt: int, gt: int, encoding: str) -> Token:
        """Build the token for the span ``data[lt:gt + 1]``."""
        is_closing = gt > lt + 1 and data[lt + 1] == _SLASH
        is_self_closing = (
            not is_closing and gt - 1 > lt and data[gt - 1] == _SLASH
        )

        inner = data[lt + (2 if is_closing else 1):gt]
        if is_self_closing:
            inner = inner[:-1]
        parts = inner.split(None, 1)
        name = parts[0].decode(encoding, errors="replace") if parts else ""

        return Token(
            raw=data[lt:gt + 1].decode(encoding, errors="replace"),
            name=name,
            display_name=strip_namespace(name),
            start=lt,
            end=gt + 1,
            is_closing=is_closing,
            is_self_closing=is_self_closing,
            is_declaration=data.startswith(self._declaration_prefix, lt),
        )
