"""Character layer for xml2csv.

This module turns raw input bytes into an ASCII-compatible buffer the
tokenizer can scan, remembering which encoding decodes its slices.
"""

from .encoding import (
    BOMDetector,
    DetectionMethod,
    EncodingDetector,
    EncodingResult,
    PreparedBuffer,
    StatisticalAnalyzer,
    UTF8Validator,
    XMLDeclarationParser,
    is_ascii_compatible,
    prepare_buffer,
)

__all__ = [
    "BOMDetector",
    "DetectionMethod",
    "EncodingDetector",
    "EncodingResult",
    "PreparedBuffer",
    "StatisticalAnalyzer",
    "UTF8Validator",
    "XMLDeclarationParser",
    "is_ascii_compatible",
    "prepare_buffer",
]
