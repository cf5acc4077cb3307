"""Tokenization layer for xml2csv.

Key Components:
    XMLTokenizer: Scans a byte buffer into tag tokens
    Token: One ``<...>`` span with derived name and flags
    TokenizationResult: Token list plus scan statistics
"""

from .tokenizer import (
    Token,
    TokenizationResult,
    XMLTokenizer,
    strip_namespace,
)

__all__ = [
    "Token",
    "TokenizationResult",
    "XMLTokenizer",
    "strip_namespace",
]
