import pytest

import udp_probe
from udp_driver import AddressParseError

BASE = ["--listen-port", "9000", "--send-port", "9001", "--send-address", "127.0.0.1"]


def parse(*extra):
    return udp_probe.build_argparser().parse_args(BASE + list(extra))


def test_defaults():
    args = parse("--data-length", "64")
    assert (args.listen_port, args.send_port, args.send_address) == (9000, 9001, "127.0.0.1")
    assert args.data_length == 64
    assert args.send_first is False


@pytest.mark.parametrize("extra,expected", [
    (["--send-first"], True),
    (["--send-first", "true"], True),
    (["--send-first", "false"], False),
    (["--send_first", "0"], False),
])
def test_send_first_forms(extra, expected):
    args = parse(*extra, "--data-length", "8")
    assert args.send_first is expected


def test_underscore_aliases():
    args = udp_probe.build_argparser().parse_args(
        ["--listen_port", "1", "--send_port", "2", "--send_address", "::1", "--data_length", "0"])
    cfg = udp_probe.config_from_args(args)
    assert cfg.peer == ("::1", 2)
    assert cfg.data_length == 0
    assert cfg.send_first is False


@pytest.mark.parametrize("extra", [
    ["--data-length", "-1"],
    ["--data-length", "ten"],
    ["--data-length", "4", "--send-first", "maybe"],
])
def test_bad_arguments_exit_2(extra):
    with pytest.raises(SystemExit) as ei:
        parse(*extra)
    assert ei.value.code == 2


def test_port_out_of_range():
    with pytest.raises(SystemExit):
        udp_probe.build_argparser().parse_args(
            ["--listen-port", "65536", "--send-port", "1", "--send-address", "127.0.0.1", "--data-length", "1"])


def test_missing_required():
    with pytest.raises(SystemExit):
        udp_probe.build_argparser().parse_args(["--listen-port", "9000"])


def test_unparsable_address():
    args = udp_probe.build_argparser().parse_args(
        ["--listen-port", "9000", "--send-port", "9001", "--send-address", "not-an-ip", "--data-length", "4"])
    with pytest.raises(AddressParseError):
        udp_probe.config_from_args(args)


def test_main_fails_on_bad_address(capsys):
    rc = udp_probe.main(["--listen-port", "0", "--send-port", "9001",
                         "--send-address", "300.0.0.1", "--data-length", "4"])
    assert rc == 1
    assert "[probe] error:" in capsys.readouterr().err
