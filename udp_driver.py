# udp_driver.py
import ipaddress, socket
from dataclasses import dataclass


class BindError(OSError):
    """Local socket could not be bound (port in use, permission, bad port)."""


class TransportError(OSError):
    """Send/receive failed after startup."""


class AddressParseError(ValueError):
    """send-address/send-port do not form a valid socket address."""


def resolve_peer(host: str, port: int) -> tuple[str, int]:
    # IP literals only, "[::1]" brackets allowed; no DNS lookups
    h = host.strip()
    if h.startswith("[") and h.endswith("]"):
        h = h[1:-1]
    try:
        ip = ipaddress.ip_address(h)
    except ValueError as e:
        raise AddressParseError(f"invalid send address {host!r}:{port}") from e
    if not 0 <= port <= 0xFFFF:
        raise AddressParseError(f"invalid send port {port} for {host!r}")
    return str(ip), port


def fmt_addr(addr: tuple[str, int]) -> str:
    host, port = addr[0], addr[1]
    return f"[{host}]:{port}" if ":" in host else f"{host}:{port}"


@dataclass
class UDPConfig:
    bind_port: int = 9000
    peer_host: str = "127.0.0.1"
    peer_port: int = 9001

    @property
    def family(self) -> int:
        return socket.AF_INET6 if ":" in self.peer_host else socket.AF_INET

    @property
    def bind_host(self) -> str:
        return "::" if self.family == socket.AF_INET6 else "0.0.0.0"


class UDPLink:
    """
    One bound datagram socket talking to one fixed peer.
    recv() blocks with no timeout; every socket failure is raised, never retried.
    """
    def __init__(self, cfg: UDPConfig):
        self.cfg = cfg
        self.peer = (cfg.peer_host, cfg.peer_port)
        if not 0 <= cfg.bind_port <= 0xFFFF:
            raise BindError(f"invalid listen port {cfg.bind_port}")
        self.sock = socket.socket(cfg.family, socket.SOCK_DGRAM)
        try:
            self.sock.bind((cfg.bind_host, cfg.bind_port))
        except OSError as e:
            self.sock.close()
            raise BindError(f"cannot bind {fmt_addr((cfg.bind_host, cfg.bind_port))}: {e}") from e

    @classmethod
    def bind(cls, listen_port: int, peer: tuple[str, int]) -> "UDPLink":
        return cls(UDPConfig(bind_port=listen_port, peer_host=peer[0], peer_port=peer[1]))

    @property
    def local_addr(self) -> tuple[str, int]:
        return self.sock.getsockname()[:2]

    def send(self, blob) -> None:
        try:
            self.sock.sendto(blob, self.peer)
        except OSError as e:
            raise TransportError(f"send to {fmt_addr(self.peer)} failed: {e}") from e

    def recv(self, buf) -> int:
        # MSG_TRUNC: the return value is the full datagram length even when
        # only len(buf) bytes fit, so oversized datagrams report their real size
        try:
            n, _sender = self.sock.recvfrom_into(buf, len(buf), socket.MSG_TRUNC)
        except OSError as e:
            raise TransportError(f"recv failed: {e}") from e
        return n

    def close(self):
        self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
