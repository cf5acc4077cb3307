"""Conversion API with progressive disclosure.

Module-level functions cover the common cases; :class:`XMLTableConverter`
holds a configuration and reusable pipeline components for repeated runs.

Pipeline: encoding detection, tokenization, tree building, discard
analysis, column naming, rendering. Structural problems raise; nothing is
repaired or skipped.
"""

import contextlib
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, ContextManager, Dict, List, Optional, TextIO, Union

from xml2csv.character import (
    DetectionMethod,
    EncodingDetector,
    EncodingResult,
    PreparedBuffer,
    prepare_buffer,
)
from xml2csv.shared import (
    ConverterConfig,
    DiagnosticEntry,
    DiagnosticSeverity,
    InputReadError,
    PerformanceMetrics,
    get_logger,
)
from xml2csv.table import (
    ColumnCollision,
    ColumnNamer,
    DiscardAnalyzer,
    Table,
    TableRenderer,
)
from xml2csv.tokenization import XMLTokenizer
from xml2csv.tools.profiling import PipelineProfiler, ProfilingSession
from xml2csv.tree import Node, XMLTreeBuilder

InputType = Union[bytes, bytearray, str, Path, BinaryIO, TextIO]

MS_PER_SECOND = 1000


@dataclass
class ConversionResult:
    """Everything produced by one conversion.

    Attributes:
        table: Header and rows
        root: Reconstructed document element, None for an empty document
        encoding: How the input encoding was determined
        discarded_tags: Tag names judged uninformative, sorted
        discarded_columns: Columns removed because all their leaves were discarded
        collisions: Columns shared by distinct namespace-qualified tag names
        diagnostics: Warnings and notes gathered along the way
        performance: Counters and timings
        profiling: Per-stage profile when profiling is enabled
    """

    table: Table
    root: Optional[Node] = None
    encoding: Optional[EncodingResult] = None
    discarded_tags: List[str] = field(default_factory=list)
    discarded_columns: List[str] = field(default_factory=list)
    collisions: List[ColumnCollision] = field(default_factory=list)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    profiling: Optional[ProfilingSession] = None
    renderer: TableRenderer = field(default_factory=TableRenderer, repr=False)
    correlation_id: Optional[str] = None

    @property
    def columns(self) -> List[str]:
        return self.table.columns

    @property
    def row_count(self) -> int:
        return self.table.row_count

    @property
    def has_warnings(self) -> bool:
        return any(d.severity == DiagnosticSeverity.WARNING for d in self.diagnostics)

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            details=details,
            correlation_id=self.correlation_id,
        ))

    def to_text(self) -> str:
        """The table as delimited text, one terminated line per row."""
        return self.renderer.to_text(self.table)

    def write(self, stream: TextIO) -> int:
        return self.renderer.write(self.table, stream)

    def to_dataframe(self) -> Any:
        return self.table.to_dataframe()

    def summary(self) -> Dict[str, Any]:
        """Plain-data overview suitable for JSON output."""
        return {
            "row_count": self.table.row_count,
            "column_count": self.table.column_count,
            "columns": list(self.table.columns),
            "discarded_tags": list(self.discarded_tags),
            "discarded_columns": list(self.discarded_columns),
            "collisions": [
                {"column": c.column, "tag_names": list(c.tag_names)}
                for c in self.collisions
            ],
            "encoding": self.encoding.encoding if self.encoding else None,
            "warnings": [
                d.message for d in self.diagnostics
                if d.severity == DiagnosticSeverity.WARNING
            ],
            "performance": self.performance.to_dict(),
        }


class XMLTableConverter:
    """Reusable converter bound to one configuration.

    Examples:
        >>> converter = XMLTableConverter()
        >>> result = converter.convert_bytes(b"<r><x><a>1</a></x><x><a>2</a></x></r>")
        >>> result.to_text()
        'a\\n"1"\\n"2"\\n'

        Tab-separated output:
        >>> converter = XMLTableConverter(ConverterConfig.tab_separated())
    """

    def __init__(
        self,
        config: Optional[ConverterConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize converter.

        Args:
            config: Pipeline configuration (defaults to ConverterConfig.default())
            correlation_id: Optional correlation ID for tracking conversions
        """
        self.config = config or ConverterConfig.default()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_table_converter")

        self._detector = EncodingDetector()
        self._tokenizer = XMLTokenizer(self.config.tokenizer, correlation_id)
        self._builder = XMLTreeBuilder(self.config.tree, correlation_id)
        self._analyzer = DiscardAnalyzer(self.config.discard, correlation_id)
        self._namer = ColumnNamer(self.config.naming, correlation_id)
        self._renderer = TableRenderer(self.config.render, correlation_id)
        self._profiler = (
            PipelineProfiler() if self.config.global_.enable_performance_profiling else None
        )

        self._conversion_count = 0

    @property
    def profiler(self) -> Optional[PipelineProfiler]:
        return self._profiler

    @property
    def renderer(self) -> TableRenderer:
        return self._renderer

    def convert(self, input_data: InputType) -> ConversionResult:
        """Convert from bytes, text, a path, or a readable stream.

        A ``str`` is taken as document text, not as a file name; pass a
        :class:`~pathlib.Path` to read a file.
        """
        if isinstance(input_data, (bytes, bytearray)):
            return self.convert_bytes(bytes(input_data))
        if isinstance(input_data, str):
            return self.convert_text(input_data)
        if isinstance(input_data, Path):
            return self.convert_file(input_data)
        if hasattr(input_data, "read"):
            return self.convert_stream(input_data)
        raise TypeError(f"unsupported input type: {type(input_data).__name__}")

    def convert_bytes(self, data: bytes, source: Optional[str] = None) -> ConversionResult:
        """Convert a complete document held in memory."""
        prepared = prepare_buffer(data, self.correlation_id, self._detector)
        return self._run(prepared, source or "<bytes>")

    def convert_text(self, text: str, source: Optional[str] = None) -> ConversionResult:
        """Convert already-decoded document text.

        The text is re-encoded as UTF-8 and any encoding declared inside it
        is ignored.
        """
        detection = EncodingResult(
            encoding="utf-8",
            confidence=1.0,
            method=DetectionMethod.FALLBACK,
            issues=["input supplied as decoded text"],
        )
        prepared = PreparedBuffer(
            data=text.encode("utf-8"), encoding="utf-8", detection=detection
        )
        return self._run(prepared, source or "<text>")

    def convert_file(self, path: Union[str, Path]) -> ConversionResult:
        """Read and convert the file at ``path``.

        Raises:
            InputReadError: The file cannot be opened or read
        """
        path = Path(path)
        try:
            with path.open("rb") as f:
                data = f.read()
        except OSError as e:
            self.logger.error(
                "Cannot read input file",
                extra={"file_path": str(path), "error": str(e)}
            )
            raise InputReadError(
                f"cannot read {path}: {e.strerror or e}", source=str(path)
            ) from e
        return self.convert_bytes(data, source=str(path))

    def convert_stream(self, stream: Union[BinaryIO, TextIO]) -> ConversionResult:
        """Read ``stream`` to the end and convert its contents.

        Raises:
            InputReadError: Reading the stream fails
        """
        source = getattr(stream, "name", None)
        source = str(source) if source is not None else "<stream>"
        try:
            data = stream.read()
        except OSError as e:
            self.logger.error(
                "Cannot read input stream",
                extra={"source": source, "error": str(e)}
            )
            raise InputReadError(f"cannot read {source}: {e}", source=source) from e
        if isinstance(data, str):
            return self.convert_text(data, source=source)
        return self.convert_bytes(data, source=source)

    def write(self, input_data: InputType, output: TextIO) -> ConversionResult:
        """Convert ``input_data`` and write the table to ``output``."""
        result = self.convert(input_data)
        self._renderer.write(result.table, output)
        return result

    def _stage(self, session: Optional[ProfilingSession], name: str) -> ContextManager:
        if self._profiler is None or session is None:
            return contextlib.nullcontext()
        return self._profiler.profile_stage(session, name)

    def _run(self, prepared: PreparedBuffer, source: str) -> ConversionResult:
        start_time = time.time()
        self._conversion_count += 1
        correlation_id = self.correlation_id or uuid.uuid4().hex[:12]

        self.logger.info(
            "Starting conversion",
            extra={
                "source": source,
                "byte_count": len(prepared),
                "encoding": prepared.encoding,
                "transcoded": prepared.transcoded,
            }
        )

        session = None
        if self._profiler is not None:
            session = self._profiler.start_session(correlation_id, input_size=len(prepared))

        try:
            with self._stage(session, "tokenize") as timing:
                tokens = self._tokenizer.tokenize(prepared.data, prepared.encoding)
                if timing is not None:
                    timing.items_processed = tokens.token_count

            with self._stage(session, "build") as timing:
                build = self._builder.build(tokens, prepared.data, prepared.encoding)
                if timing is not None:
                    timing.items_processed = build.node_count

            with self._stage(session, "discard") as timing:
                discarded = self._analyzer.analyze(build.stats)
                marked = self._analyzer.mark(build.root, discarded)
                if timing is not None:
                    timing.items_processed = marked

            with self._stage(session, "naming") as timing:
                naming = self._namer.assign(build.root)
                if timing is not None:
                    timing.items_processed = len(naming.columns)

            with self._stage(session, "render") as timing:
                table = self._renderer.render(build.root, naming.final)
                if timing is not None:
                    timing.items_processed = table.row_count
        finally:
            if session is not None:
                self._profiler.end_session(session)

        result = ConversionResult(
            table=table,
            root=build.root,
            encoding=prepared.detection,
            discarded_tags=sorted(discarded),
            discarded_columns=list(naming.discarded_columns),
            collisions=list(naming.collisions),
            profiling=session,
            renderer=self._renderer,
            correlation_id=correlation_id,
        )

        if build.root is None:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                "Input contains no elements; the table is empty",
                "tree_builder",
                details={"source": source},
            )
        for collision in naming.collisions:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"Tags {', '.join(collision.tag_names)} share column '{collision.column}'",
                "column_namer",
                details={"column": collision.column, "tag_names": collision.tag_names},
            )
        for issue in prepared.detection.issues:
            result.add_diagnostic(DiagnosticSeverity.INFO, issue, "encoding")
        if build.undecodable_offsets:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"{len(build.undecodable_offsets)} field value(s) are not valid "
                f"{prepared.encoding}; undecodable bytes were replaced",
                "tree_builder",
                details={
                    "encoding": prepared.encoding,
                    "offsets": build.undecodable_offsets,
                },
            )

        metrics = result.performance
        metrics.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        metrics.bytes_processed = len(prepared)
        metrics.tokens_generated = tokens.token_count
        metrics.nodes_created = build.node_count
        metrics.columns_discovered = len(naming.columns)
        metrics.columns_discarded = len(naming.discarded_columns)
        metrics.rows_emitted = table.row_count
        if session is not None:
            metrics.memory_used_bytes = session.peak_memory

        self.logger.info(
            "Conversion completed",
            extra={
                "source": source,
                "row_count": table.row_count,
                "column_count": table.column_count,
                "processing_time_ms": metrics.processing_time_ms,
                "conversion_count": self._conversion_count,
            }
        )
        return result

    @property
    def statistics(self) -> Dict[str, Any]:
        return {
            "conversion_count": self._conversion_count,
            "correlation_id": self.correlation_id,
            "config_name": self.config.name,
        }


def convert(
    input_data: InputType,
    config: Optional[ConverterConfig] = None,
    correlation_id: Optional[str] = None
) -> ConversionResult:
    """Convert a document to a table.

    Args:
        input_data: Document as bytes, text, a Path, or a readable stream
        config: Optional pipeline configuration
        correlation_id: Optional correlation ID for log tracking

    Returns:
        ConversionResult with the table and diagnostics

    Raises:
        StructuralError: The document's tags do not form a single balanced tree
        InputReadError: A file or stream could not be read

    Examples:
        >>> result = convert(b"<r><x><a>1</a><b>x</b></x><x><a>2</a><b>y</b></x></r>")
        >>> result.columns
        ['a', 'b']
        >>> result.table.rows
        [['1', 'x'], ['2', 'y']]
    """
    return XMLTableConverter(config, correlation_id).convert(input_data)


def convert_bytes(
    data: bytes,
    config: Optional[ConverterConfig] = None,
    correlation_id: Optional[str] = None
) -> ConversionResult:
    return XMLTableConverter(config, correlation_id).convert_bytes(data)


def convert_file(
    path: Union[str, Path],
    config: Optional[ConverterConfig] = None,
    correlation_id: Optional[str] = None
) -> ConversionResult:
    """Convert the file at ``path``; a ``str`` here is a file name."""
    return XMLTableConverter(config, correlation_id).convert_file(path)


def convert_stream(
    stream: Union[BinaryIO, TextIO],
    config: Optional[ConverterConfig] = None,
    correlation_id: Optional[str] = None
) -> ConversionResult:
    return XMLTableConverter(config, correlation_id).convert_stream(stream)


def write_csv(
    input_data: InputType,
    output: TextIO,
    config: Optional[ConverterConfig] = None,
    correlation_id: Optional[str] = None
) -> ConversionResult:
    """Convert ``input_data`` and write the delimited table to ``output``."""
    return XMLTableConverter(config, correlation_id).write(input_data, output)
