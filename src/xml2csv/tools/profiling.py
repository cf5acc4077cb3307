"""Performance profiling for the conversion pipeline.

Records wall time and resident memory per pipeline stage so slow or
memory-hungry stages of a conversion can be spotted.
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil

from xml2csv.shared.logging import get_logger

MAX_SESSIONS = 100


@dataclass
class StageTiming:
    """Metrics for one pipeline stage."""

    stage_name: str
    start_time: float
    end_time: float
    memory_start: int  # bytes
    memory_end: int  # bytes
    items_processed: int = 0

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000

    @property
    def memory_delta(self) -> int:
        return self.memory_end - self.memory_start

    @property
    def items_per_second(self) -> float:
        duration_s = self.end_time - self.start_time
        return self.items_processed / duration_s if duration_s > 0 else 0.0


@dataclass
class ProfilingSession:
    """All stages of one conversion."""

    session_id: str
    start_time: float
    end_time: float
    input_size: int  # bytes
    stages: List[StageTiming] = field(default_factory=list)

    @property
    def total_duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000

    @property
    def throughput_mb_per_s(self) -> float:
        duration_s = self.end_time - self.start_time
        if duration_s <= 0:
            return 0.0
        return (self.input_size / (1024 * 1024)) / duration_s

    @property
    def peak_memory(self) -> int:
        """Highest RSS sampled at any stage boundary."""
        samples = [s.memory_start for s in self.stages] + [s.memory_end for s in self.stages]
        return max(samples, default=0)

    def stage(self, name: str) -> Optional[StageTiming]:
        for timing in self.stages:
            if timing.stage_name == name:
                return timing
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "input_size": self.input_size,
            "total_duration_ms": self.total_duration_ms,
            "throughput_mb_per_s": self.throughput_mb_per_s,
            "peak_memory": self.peak_memory,
            "stages": [
                {
                    "stage_name": s.stage_name,
                    "duration_ms": s.duration_ms,
                    "memory_delta": s.memory_delta,
                    "items_processed": s.items_processed,
                }
                for s in self.stages
            ],
        }


class PipelineProfiler:
    """Profiler for conversion runs.

    Examples:
        >>> profiler = PipelineProfiler()
        >>> session = profiler.start_session("run-1", input_size=len(data))
        >>> with profiler.profile_stage(session, "tokenize") as timing:
        ...     result = tokenizer.tokenize(data)
        ...     timing.items_processed = result.token_count
        >>> profiler.end_session(session)
    """

    def __init__(self, enable_memory_tracking: bool = True, max_sessions: int = MAX_SESSIONS):
        self.enable_memory_tracking = enable_memory_tracking
        if max_sessions < 1:
            raise ValueError(f"max_sessions must be at least 1, got {max_sessions}")
        self.max_sessions = max_sessions
        self.sessions: List[ProfilingSession] = []
        self.logger = get_logger(__name__, None, "pipeline_profiler")
        self._process = psutil.Process() if enable_memory_tracking else None

    def current_rss(self) -> int:
        """Resident set size of this process, or 0 when tracking is off."""
        if self._process is None:
            return 0
        return self._process.memory_info().rss

    def start_session(self, session_id: str, input_size: int = 0) -> ProfilingSession:
        session = ProfilingSession(
            session_id=session_id,
            start_time=time.time(),
            end_time=0.0,
            input_size=input_size
        )
        self.logger.debug(
            "Started profiling session",
            extra={"session_id": session_id, "input_size": input_size}
        )
        return session

    def end_session(self, session: ProfilingSession) -> None:
        session.end_time = time.time()
        self.sessions.append(session)
        # Oldest sessions are dropped once the history is full
        del self.sessions[:-self.max_sessions]
        self.logger.info(
            "Ended profiling session",
            extra={
                "session_id": session.session_id,
                "duration_ms": session.total_duration_ms,
                "throughput_mb_s": session.throughput_mb_per_s,
                "stage_count": len(session.stages)
            }
        )

    def profile_stage(self, session: ProfilingSession, stage_name: str) -> "StageProfiler":
        """Context manager recording one stage into ``session``."""
        return StageProfiler(self, session, stage_name)

    def format_report(self, session: ProfilingSession) -> str:
        """Human-readable per-stage breakdown."""
        lines = [
            f"Session {session.session_id}: {session.total_duration_ms:.2f} ms, "
            f"{session.input_size} bytes, {session.throughput_mb_per_s:.2f} MB/s"
        ]
        for timing in session.stages:
            lines.append(
                f"  {timing.stage_name:<10} {timing.duration_ms:10.2f} ms "
                f"{timing.memory_delta:+12d} B  {timing.items_processed} items"
            )
        return "\n".join(lines)

    def save_report(self, output_path: Path) -> None:
        """Write every finished session to ``output_path`` as JSON."""
        report = {
            "generation_time": time.time(),
            "sessions": [session.to_dict() for session in self.sessions],
        }
        with output_path.open("w", encoding="utf-8") as f:
            json.dump(report, f, indent=2)
        self.logger.info(
            "Saved profiling report",
            extra={"path": str(output_path), "session_count": len(self.sessions)}
        )


class StageProfiler:
    """Context manager for a single pipeline stage."""

    def __init__(self, profiler: PipelineProfiler, session: ProfilingSession, stage_name: str):
        self.profiler = profiler
        self.session = session
        self.stage_name = stage_name
        self.timing: Optional[StageTiming] = None

    def __enter__(self) -> StageTiming:
        self.timing = StageTiming(
            stage_name=self.stage_name,
            start_time=time.time(),
            end_time=0.0,
            memory_start=self.profiler.current_rss(),
            memory_end=0,
        )
        return self.timing

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.timing is None:
            return
        self.timing.end_time = time.time()
        self.timing.memory_end = self.profiler.current_rss()
        self.session.stages.append(self.timing)
        self.profiler.logger.debug(
            "Stage profiled",
            extra={
                "session_id": self.session.session_id,
                "stage_name": self.stage_name,
                "duration_ms": self.timing.duration_ms,
                "memory_delta": self.timing.memory_delta
            }
        )
