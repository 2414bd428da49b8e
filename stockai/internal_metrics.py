from __future__ import annotations

from dataclasses import dataclass
from threading import Lock


@dataclass
class SourceStats:
    attempts: int = 0
    successes: int = 0
    failures: int = 0
    resolved: int = 0
    latency_total_ms: float = 0.0
    last_error: str | None = None

    def avg_latency_ms(self) -> float:
        if self.attempts == 0:
            return 0.0
        return self.latency_total_ms / self.attempts


class SourceMetrics:
    """Observed attempt outcomes per quote source."""

    def __init__(self):
        self._per_source: dict[str, SourceStats] = {}
        self._lock = Lock()

    def _get(self, source: str) -> SourceStats:
        if source not in self._per_source:
            self._per_source[source] = SourceStats()
        return self._per_source[source]

    def record_attempt(self, source: str, success: bool, latency_ms: float, error: str | None = None):
        with self._lock:
            s = self._get(source)
            s.attempts += 1
            s.latency_total_ms += max(latency_ms, 0.0)
            if success:
                s.successes += 1
            else:
                s.failures += 1
                s.last_error = error

    def record_resolution(self, source: str):
        with self._lock:
            self._get(source).resolved += 1

    def source_status(self) -> dict[str, dict[str, float | int | str | None]]:
        with self._lock:
            out: dict[str, dict[str, float | int | str | None]] = {}
            for name, s in self._per_source.items():
                failure_rate = 0.0 if s.attempts == 0 else (s.failures / s.attempts)
                out[name] = {
                    "attempts": s.attempts,
                    "successes": s.successes,
                    "failures": s.failures,
                    "resolved": s.resolved,
                    "failure_rate": round(failure_rate, 4),
                    "average_latency_ms": round(s.avg_latency_ms(), 3),
                    "last_error": s.last_error,
                }
            return out

    def global_metrics(self) -> dict[str, float | int | dict]:
        per = self.source_status()
        resolutions = sum(v["resolved"] for v in per.values())
        synthetic = per.get("synthetic", {}).get("resolved", 0)
        synthetic_rate = 0.0 if resolutions == 0 else (synthetic / resolutions)
        return {
            "resolution_count": resolutions,
            "synthetic_rate": round(synthetic_rate, 4),
            "per_source": per,
        }
