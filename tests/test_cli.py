from __future__ import annotations

import pytest

from meshwatch.cli import build_parser, main


def test_parser_subcommands() -> None:
    args = build_parser().parse_args(["send-test", "--url", "http://gw:5000", "--room-id", "3"])

    assert args.command == "send-test"
    assert args.url == "http://gw:5000"
    assert args.room_id == 3
    assert args.log_level == "INFO"


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_bad_configuration_exits_with_code_2(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("MESH_PORT", "eighty")

    assert main(["check"]) == 2
    assert "MESH_PORT" in capsys.readouterr().err
