import pytest


class FakeClock:
    def __init__(self, t: float = 100.0):
        self.t = t

    def __call__(self) -> float:
        return self.t


class ScriptedLink:
    """
    In-memory link: recv() replays `script` in order, send() records copies.
    A script entry is either bytes (an incoming datagram, optionally paired
    with the delay before it arrives) or an exception instance to raise.
    """
    def __init__(self, script, clock: FakeClock = None, sent_error=None):
        self.script = list(script)
        self.clock = clock
        self.sent = []
        self.log = []
        self.recv_calls = 0
        self.sent_error = sent_error

    def send(self, blob):
        if self.sent_error is not None:
            raise self.sent_error
        self.log.append("send")
        self.sent.append(bytes(blob))

    def recv(self, buf) -> int:
        self.recv_calls += 1
        self.log.append("recv")
        if not self.script:
            raise EOFError("script exhausted")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        delay = 0.0
        if isinstance(item, tuple):
            delay, item = item
        if self.clock is not None:
            self.clock.t += delay
        n = min(len(item), len(buf))
        buf[:n] = item[:n]
        return len(item)


@pytest.fixture
def clock():
    return FakeClock()
