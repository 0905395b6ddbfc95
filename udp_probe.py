#!/usr/bin/env python3
# udp_probe.py — UDP round-trip latency probe
# - binds --listen-port on all interfaces, echoes every datagram to the peer
# - --send-first kicks off the ping-pong with one zero-filled datagram
# - prints rate / shortest / longest / average once per second
# - any error is fatal (non-zero exit)

import argparse
import sys
from typing import List, Optional

from udp_driver import UDPLink, AddressParseError, BindError, TransportError, resolve_peer, fmt_addr
from probe import ProbeConfig, ProbeLoop, SizeMismatchError
from telemetry import RoundCounterOverflow


def _port(s: str) -> int:
    v = int(s)
    if not 0 <= v <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"port out of range: {v}")
    return v


def _length(s: str) -> int:
    v = int(s)
    if v < 0:
        raise argparse.ArgumentTypeError(f"data length must be >= 0, got {v}")
    return v


def _bool(s: str) -> bool:
    v = s.strip().lower()
    if v in ("true", "1", "yes", "on"):
        return True
    if v in ("false", "0", "no", "off"):
        return False
    raise argparse.ArgumentTypeError(f"expected true/false, got {s!r}")


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="UDP round-trip latency probe (echo + per-second stats).")
    p.add_argument("--listen-port", "--listen_port", dest="listen_port", type=_port, required=True,
                   help="local UDP port to bind on all interfaces")
    p.add_argument("--send-port", "--send_port", dest="send_port", type=_port, required=True,
                   help="peer UDP port")
    p.add_argument("--send-address", "--send_address", dest="send_address", type=str, required=True,
                   help="peer IP address (IPv4 or IPv6 literal)")
    p.add_argument("--send-first", "--send_first", dest="send_first", type=_bool,
                   nargs="?", const=True, default=False,
                   help="send one zero-filled datagram before waiting (default false)")
    p.add_argument("--data-length", "--data_length", dest="data_length", type=_length, required=True,
                   help="exact datagram size in bytes (0 allowed)")
    return p


def config_from_args(args: argparse.Namespace) -> ProbeConfig:
    peer = resolve_peer(args.send_address, args.send_port)
    return ProbeConfig(listen_port=args.listen_port, peer=peer,
                       data_length=args.data_length, send_first=args.send_first)


def _report(line: str):
    print(line, flush=True)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argparser().parse_args(argv)

    try:
        cfg = config_from_args(args)
        link = UDPLink.bind(cfg.listen_port, cfg.peer)
    except (AddressParseError, BindError) as e:
        print(f"[probe] error: {e}", file=sys.stderr)
        return 1

    with link:
        print(f"[probe] listening on {fmt_addr(link.local_addr)}, peer {fmt_addr(cfg.peer)}, "
              f"{cfg.data_length}-byte datagrams{' (sending first)' if cfg.send_first else ''}",
              flush=True)
        try:
            ProbeLoop(cfg, link, out=_report).run()
        except (TransportError, SizeMismatchError, RoundCounterOverflow) as e:
            print(f"[probe] error: {e}", file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            print("[probe] interrupted", file=sys.stderr)
            return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
