# probe.py — receive / echo / measure loop
import enum, time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from telemetry import StatsWindow, WindowReport


class SizeMismatchError(Exception):
    def __init__(self, size: int, expected: int):
        super().__init__(f"received datagram of unexpected size: {size} (expected {expected})")
        self.size = size
        self.expected = expected


class Link(Protocol):
    def send(self, blob) -> None: ...
    def recv(self, buf) -> int: ...


@dataclass(frozen=True)
class ProbeConfig:
    listen_port: int
    peer: tuple[str, int]
    data_length: int
    send_first: bool = False

    def __post_init__(self):
        if not 0 <= self.listen_port <= 0xFFFF:
            raise ValueError(f"listen_port out of range: {self.listen_port}")
        if self.data_length < 0:
            raise ValueError(f"data_length must be >= 0, got {self.data_length}")


class ProbeState(enum.Enum):
    AWAITING_FIRST = "awaiting_first"
    STEADY = "steady"
    ABORTED = "aborted"


class ProbeLoop:
    """
    Single-threaded ping-pong loop over one link.

    Every cycle receives one datagram into the shared buffer, checks its size,
    echoes the buffer back unmodified and folds the time since the previous
    arrival into the current StatsWindow. Once the window is older than a
    second it is reported through `out` and reset.

    Nothing is retried: SizeMismatchError, RoundCounterOverflow and the
    link's TransportError all abort the loop and propagate to the caller.
    """
    def __init__(self, cfg: ProbeConfig, link: Link,
                 clock: Callable[[], float] = time.perf_counter,
                 out: Callable[[str], None] = print):
        self.cfg = cfg
        self.link = link
        self.clock = clock
        self.out = out
        self.buf = bytearray(cfg.data_length)
        self.state: Optional[ProbeState] = None
        self.window: Optional[StatsWindow] = None
        self.last_arrival = 0.0

    def start(self):
        if self.cfg.send_first:
            self._guard(self.link.send, self.buf)
        now = self.clock()
        self.window = StatsWindow(opened_at=now)
        self.last_arrival = now
        self.state = ProbeState.STEADY if self.cfg.send_first else ProbeState.AWAITING_FIRST

    def step(self) -> Optional[WindowReport]:
        if self.state is None:
            self.start()
        if self.state is ProbeState.ABORTED:
            raise RuntimeError("probe loop already aborted")
        return self._guard(self._cycle)

    def run(self):
        self.start()
        while True:
            self.step()

    def _guard(self, fn, *args):
        try:
            return fn(*args)
        except Exception:
            self.state = ProbeState.ABORTED
            raise

    def _cycle(self) -> Optional[WindowReport]:
        size = self.link.recv(self.buf)
        arrival = self.clock()
        if size != self.cfg.data_length:
            raise SizeMismatchError(size, self.cfg.data_length)
        self.state = ProbeState.STEADY
        self.link.send(self.buf)

        # sample is taken after the echo, against the previous arrival
        self.window.fold(self.clock() - self.last_arrival)
        self.last_arrival = arrival

        now = self.clock()
        if not self.window.due(now):
            return None
        rep = self.window.report(now)
        for line in rep.lines():
            self.out(line)
        self.window.reset(self.clock())
        return rep
