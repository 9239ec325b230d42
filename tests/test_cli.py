import json
import logging
import os

import pytest

from portsweep import cli
from portsweep.cli import build_parser, config_from_args, main
from portsweep.logger import setup_logging


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **kw: None)


def parse(*argv):
    parser = build_parser()
    return config_from_args(parser, parser.parse_args(list(argv)))


def test_defaults():
    cfg = parse()
    assert (cfg.host, cfg.start_port, cfg.end_port) == ("127.0.0.1", 1, 65535)
    assert cfg.concurrency == cli.DEFAULT_CONCURRENCY
    assert cfg.timeout_s == cli.DEFAULT_TIMEOUT


def test_ports_spec_overrides_start_end():
    cfg = parse("-s", "1", "-e", "10", "-p", "7000-7002", "-i", " [::1] ", "-c", "25000", "-t", "0.5")
    assert (cfg.host, cfg.start_port, cfg.end_port) == ("::1", 7000, 7002)
    assert (cfg.concurrency, cfg.timeout_s) == (25000, 0.5)


@pytest.mark.parametrize(
    "argv",
    [
        ["-c", "0"],
        ["-t", "0"],
        ["-t", "-1"],
        ["-s", "-1"],
        ["-e", "65536"],
        ["-p", "abc"],
        ["-p", "70000-5"],
        ["-i", ""],
        ["--engine", "fork"],
    ],
)
def test_invalid_arguments_exit(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    assert exc.value.code == 2


def test_scan_listener(listener, capsys):
    rc = main(["-p", str(listener), "-t", "0.5", "--progress-every", "0"])
    out = capsys.readouterr().out
    assert rc == 0
    assert out.splitlines()[:2] == ["Open ports (1 found):", f"  {listener}"]
    assert out.splitlines()[-1].startswith("Execution Time: ")


def test_inverted_range_reports_nothing(capsys):
    assert main(["-s", "10", "-e", "5", "--engine", "asyncio"]) == 0
    assert capsys.readouterr().out.startswith("Open ports (0 found):\n")


def test_progress_and_save(listener, tmp_path, capsys):
    rc = main([
        "-p", f"{listener}-{listener + 1}",
        "-t", "0.5",
        "--progress-every", "1",
        "--format", "json",
        "--out-dir", str(tmp_path),
    ])
    assert rc == 0
    err = capsys.readouterr().err
    assert "[*] Scanned 2/2" in err
    (saved,) = os.listdir(tmp_path)
    with open(tmp_path / saved, encoding="utf-8") as f:
        assert listener in json.load(f)["open_ports"]


def test_setup_logging_writes_file(tmp_path, restore_root_logging):
    log_file = tmp_path / "logs" / "scan.log"
    setup_logging("info", str(log_file))
    logging.getLogger("portsweep.test").info("hello")
    for h in logging.getLogger().handlers:
        h.flush()
    assert " - INFO - hello" in log_file.read_text(encoding="utf-8")


def test_setup_logging_rejects_unknown_level(restore_root_logging):
    with pytest.raises(ValueError):
        setup_logging("LOUD")
