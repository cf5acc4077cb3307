"""Encoding detection and buffer preparation.

The tokenizer works on raw bytes and relies on ``<``, ``>`` and ``/`` being
single ASCII bytes. Documents in ASCII-compatible encodings are tokenized
as-is; anything else (UTF-16, UTF-32) is transcoded to UTF-8 first.
Undeclared input that is not valid UTF-8 is read as Latin-1.
"""

import codecs
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional

from xml2csv.shared import get_logger

DECLARATION_SCAN_LIMIT = 1024
FALLBACK_ENCODING = "utf-8"
_PROBE_TEXT = "<?xml />"

STATISTICAL_SAMPLE_SIZE = 8192
ASCII_EXTENDED_MAX = 128

# Confidence thresholds
CONFIDENCE_STATISTICAL_THRESHOLD = 0.7
CONFIDENCE_UTF8_VALIDATION_THRESHOLD = 0.6

# ASCII ratio thresholds for Latin-1 detection
LATIN1_HIGH_ASCII_RATIO = 0.9
LATIN1_MEDIUM_ASCII_RATIO = 0.7
LATIN1_HIGH_CONFIDENCE = 0.7
LATIN1_MEDIUM_CONFIDENCE = 0.6
LATIN1_LOW_CONFIDENCE = 0.3


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    UTF8_VALIDATION = "utf8_validation"
    STATISTICAL = "statistical"
    FALLBACK = "fallback"


@dataclass
class EncodingResult:
    """Result of encoding detection.

    Attributes:
        encoding: Detected encoding name (canonical form)
        confidence: Confidence score from 0.0 to 1.0
        method: Detection method used
        issues: List of issues found during detection
    """
    encoding: str
    confidence: float
    method: DetectionMethod
    issues: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate confidence score range."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"Confidence must be between 0.0 and 1.0, got {self.confidence}"
            )


class BOMDetector:
    """Byte Order Mark (BOM) detection, plus BOM-less UTF-16 sniffing."""

    BOM_PATTERNS: ClassVar[Dict[bytes, str]] = {
        b"\xef\xbb\xbf": "utf-8",
        b"\xff\xfe": "utf-16-le",
        b"\xfe\xff": "utf-16-be",
        b"\xff\xfe\x00\x00": "utf-32-le",
        b"\x00\x00\xfe\xff": "utf-32-be",
    }

    # "<?" in the two UTF-16 byte orders, for documents without a BOM
    UTF16_SIGNATURES: ClassVar[Dict[bytes, str]] = {
        b"\x3c\x00\x3f\x00": "utf-16-le",
        b"\x00\x3c\x00\x3f": "utf-16-be",
    }

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if a BOM or UTF-16 signature is found, None otherwise
        """
        if not data:
            return None

        # Longer patterns first so UTF-32 LE is not mistaken for UTF-16 LE
        for bom_bytes, encoding in sorted(
            self.BOM_PATTERNS.items(), key=lambda x: len(x[0]), reverse=True
        ):
            if data.startswith(bom_bytes):
                return EncodingResult(
                    encoding=encoding,
                    confidence=1.0,
                    method=DetectionMethod.BOM,
                )

        for signature, encoding in self.UTF16_SIGNATURES.items():
            if data.startswith(signature):
                return EncodingResult(
                    encoding=encoding,
                    confidence=0.9,
                    method=DetectionMethod.BOM,
                    issues=["UTF-16 detected without byte order mark"],
                )

        return None

    def bom_length(self, data: bytes) -> int:
        """Return the length of the BOM ``data`` starts with, or 0."""
        for bom_bytes in sorted(self.BOM_PATTERNS, key=len, reverse=True):
            if data.startswith(bom_bytes):
                return len(bom_bytes)
        return 0


class XMLDeclarationParser:
    """Parser for XML encoding declarations."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'<\?xml\s+.*?encoding\s*=\s*["\']([^"\']+)["\'].*?\?>',
        re.IGNORECASE | re.DOTALL
    )

    def parse_declaration(self, data: bytes) -> Optional[EncodingResult]:
        """Parse encoding from XML declaration.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if a declaration with an encoding is found
        """
        if not data:
            return None

        match = self.XML_DECLARATION_PATTERN.search(data[:DECLARATION_SCAN_LIMIT])
        if not match:
            return None

        declared_encoding = match.group(1).decode("ascii", errors="ignore").lower()
        normalized_encoding = self._normalize_encoding(declared_encoding)

        if not self._is_valid_encoding(normalized_encoding):
            return EncodingResult(
                encoding=FALLBACK_ENCODING,
                confidence=0.3,
                method=DetectionMethod.XML_DECLARATION,
                issues=[f"Invalid declared encoding: {declared_encoding}"]
            )

        # The declaration was readable as ASCII, so the bytes cannot really
        # be in a multi-byte-unit encoding.
        if not is_ascii_compatible(normalized_encoding):
            return EncodingResult(
                encoding=FALLBACK_ENCODING,
                confidence=0.5,
                method=DetectionMethod.XML_DECLARATION,
                issues=[
                    f"Declared encoding {declared_encoding} contradicts "
                    "single-byte declaration"
                ]
            )

        return EncodingResult(
            encoding=normalized_encoding,
            confidence=0.9,
            method=DetectionMethod.XML_DECLARATION,
        )

    def _normalize_encoding(self, encoding: str) -> str:
        """Normalize encoding name to canonical form."""
        aliases = {
            "utf8": "utf-8",
            "utf16": "utf-16",
            "utf32": "utf-32",
            "iso-8859-1": "latin-1",
            "windows-1252": "cp1252",
        }
        return aliases.get(encoding, encoding)

    def _is_valid_encoding(self, encoding: str) -> bool:
        """Check if encoding is supported by Python codecs."""
        try:
            codecs.lookup(encoding)
        except LookupError:
            return False
        else:
            return True


def is_ascii_compatible(encoding: str) -> bool:
    """Check whether markup delimiters encode as single ASCII bytes."""
    try:
        return _PROBE_TEXT.encode(encoding) == _PROBE_TEXT.encode("ascii")
    except (LookupError, UnicodeError):
        return False


class UTF8Validator:
    """Strict UTF-8 validation of the whole buffer."""

    def validate(self, data: bytes) -> EncodingResult:
        """Validate ``data`` as UTF-8.

        Overlong forms and encoded surrogates are rejected by the strict
        codec, so a clean decode is taken as certain.

        Args:
            data: Byte data to validate

        Returns:
            EncodingResult with confidence 1.0 if valid, 0.0 otherwise
        """
        try:
            data.decode("utf-8", errors="strict")
        except UnicodeDecodeError as e:
            return EncodingResult(
                encoding="utf-8",
                confidence=0.0,
                method=DetectionMethod.UTF8_VALIDATION,
                issues=[f"UTF-8 decode error at byte {e.start}: {e.reason}"]
            )
        return EncodingResult(
            encoding="utf-8",
            confidence=1.0,
            method=DetectionMethod.UTF8_VALIDATION,
        )


class StatisticalAnalyzer:
    """Byte-frequency guess for input that is not valid UTF-8."""

    def analyze(self, data: bytes) -> Optional[EncodingResult]:
        """Score ``data`` as Latin-1.

        Markup is mostly ASCII, so a buffer dominated by ASCII bytes with
        scattered high bytes reads as a single-byte Western encoding.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult for Latin-1, or None for an empty buffer
        """
        if not data:
            return None

        sample = data[:STATISTICAL_SAMPLE_SIZE]
        confidence = self._analyze_latin1_patterns(sample)
        issues = [] if confidence >= CONFIDENCE_STATISTICAL_THRESHOLD else [
            "Inconclusive statistical analysis"
        ]
        return EncodingResult(
            encoding="latin-1",
            confidence=confidence,
            method=DetectionMethod.STATISTICAL,
            issues=issues,
        )

    def _analyze_latin1_patterns(self, data: bytes) -> float:
        ascii_ratio = sum(1 for b in data if b < ASCII_EXTENDED_MAX) / len(data)

        if ascii_ratio > LATIN1_HIGH_ASCII_RATIO:
            return LATIN1_HIGH_CONFIDENCE
        if ascii_ratio > LATIN1_MEDIUM_ASCII_RATIO:
            return LATIN1_MEDIUM_CONFIDENCE
        return LATIN1_LOW_CONFIDENCE


class EncodingDetector:
    """Cascading encoding detection.

    1. BOM (or BOM-less UTF-16 signature)
    2. XML declaration
    3. UTF-8 validation
    4. Latin-1 statistical analysis
    5. Fallback to UTF-8
    """

    def __init__(self) -> None:
        """Initialize detection components."""
        self.bom_detector = BOMDetector()
        self.xml_parser = XMLDeclarationParser()
        self.utf8_validator = UTF8Validator()
        self.statistical_analyzer = StatisticalAnalyzer()

    def detect(self, data: bytes) -> EncodingResult:
        """Detect encoding of ``data``.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult with detected encoding and metadata
        """
        if not data:
            return EncodingResult(
                encoding=FALLBACK_ENCODING,
                confidence=0.5,
                method=DetectionMethod.FALLBACK,
            )

        bom_result = self.bom_detector.detect(data)
        if bom_result:
            return bom_result

        xml_result = self.xml_parser.parse_declaration(data)
        if xml_result:
            return xml_result

        utf8_result = self.utf8_validator.validate(data)
        if utf8_result.confidence >= CONFIDENCE_UTF8_VALIDATION_THRESHOLD:
            return utf8_result

        stat_result = self.statistical_analyzer.analyze(data)
        if stat_result and stat_result.confidence >= CONFIDENCE_STATISTICAL_THRESHOLD:
            stat_result.issues.append(
                "Input is not valid UTF-8; decoding as Latin-1"
            )
            return stat_result

        return EncodingResult(
            encoding=FALLBACK_ENCODING,
            confidence=0.3,
            method=DetectionMethod.FALLBACK,
            issues=utf8_result.issues + ["All detection methods failed, using fallback"],
        )


@dataclass
class PreparedBuffer:
    """Byte buffer ready for tokenization, plus the encoding of its slices."""

    data: bytes
    encoding: str
    detection: EncodingResult
    transcoded: bool = False

    def __len__(self) -> int:
        return len(self.data)


def prepare_buffer(
    data: bytes,
    correlation_id: Optional[str] = None,
    detector: Optional[EncodingDetector] = None,
) -> PreparedBuffer:
    """Detect the encoding of ``data`` and make it safe to tokenize.

    Args:
        data: Raw document bytes
        correlation_id: Optional correlation ID for logging
        detector: Optional detector instance to reuse

    Returns:
        PreparedBuffer whose ``data`` is ASCII-compatible
    """
    logger = get_logger(__name__, correlation_id, "encoding")
    detector = detector or EncodingDetector()
    detection = detector.detect(data)

    if is_ascii_compatible(detection.encoding):
        logger.debug(
            "Encoding detected",
            extra={"encoding": detection.encoding, "method": detection.method.value}
        )
        return PreparedBuffer(data=data, encoding=detection.encoding,
                              detection=detection)

    bom = detector.bom_detector.bom_length(data)
    text = data[bom:].decode(detection.encoding, errors="replace")
    logger.info(
        "Transcoding input to UTF-8",
        extra={"source_encoding": detection.encoding, "byte_count": len(data)}
    )
    return PreparedBuffer(
        data=text.encode("utf-8"),
        encoding="utf-8",
        detection=detection,
        transcoded=True,
    )
