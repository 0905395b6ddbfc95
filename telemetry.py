# telemetry.py
from dataclasses import dataclass
from typing import Optional, List

ROUND_MAX = 0xFFFFFFFF      # u32 round counter
REPORT_INTERVAL = 1.0       # seconds


class RoundCounterOverflow(OverflowError):
    pass


def fmt_duration(s: Optional[float]) -> str:
    if s is None:
        return "none"
    if s >= 1.0:
        return f"{s:.3f}s"
    if s >= 1e-3:
        return f"{s*1e3:.3f}ms"
    if s >= 1e-6:
        return f"{s*1e6:.3f}µs"
    return f"{s*1e9:.0f}ns"


@dataclass(frozen=True)
class WindowReport:
    count: int
    elapsed: float
    shortest: Optional[float]
    longest: Optional[float]

    @property
    def rate(self) -> float:
        return self.count / self.elapsed if self.elapsed > 0 else 0.0

    @property
    def average(self) -> Optional[float]:
        # window time over rounds, not a mean of the inter-arrival samples
        return self.elapsed / self.count if self.count else None

    def lines(self) -> List[str]:
        return [
            f"Received {self.rate:.1f}/sec",
            f"Shortest: {fmt_duration(self.shortest)}, Longest: {fmt_duration(self.longest)}",
            f"Average: {fmt_duration(self.average)}",
        ]


@dataclass
class StatsWindow:
    """
    Aggregate over one reporting interval.

    count is the number of samples folded since the last reset, and
    shortest <= sample <= longest holds for each of them.
    """
    opened_at: float
    count: int = 0
    shortest: Optional[float] = None
    longest: Optional[float] = None
    max_count: int = ROUND_MAX

    def fold(self, sample: float):
        if self.count >= self.max_count:
            raise RoundCounterOverflow(f"round counter overflow at {self.count}")
        self.count += 1
        # ties go to the newest sample
        if self.shortest is None or sample <= self.shortest:
            self.shortest = sample
        if self.longest is None or sample >= self.longest:
            self.longest = sample

    def elapsed(self, now: float) -> float:
        return now - self.opened_at

    def due(self, now: float) -> bool:
        return self.elapsed(now) > REPORT_INTERVAL

    def report(self, now: float) -> WindowReport:
        return WindowReport(count=self.count, elapsed=self.elapsed(now),
                            shortest=self.shortest, longest=self.longest)

    def reset(self, now: float):
        self.count = 0
        self.shortest = None
        self.longest = None
        self.opened_at = now
