"""Tests for the command-line interface."""

import json

import pytest

from phishguard.config import Config
from phishguard.main import build_parser, run_command


@pytest.fixture
def config(tmp_path):
    return Config(data_dir=tmp_path / "data", config_dir=tmp_path / "config")


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_classify_accepts_multiple_urls():
    args = build_parser().parse_args(["classify", "https://a.example/", "https://b.example/"])
    assert args.command == "classify"
    assert args.urls == ["https://a.example/", "https://b.example/"]


@pytest.mark.asyncio
async def test_classify_exit_code_reflects_blocking(config, capsys):
    args = build_parser().parse_args(["classify", "https://example.com/"])
    assert await run_command(args, config) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["url"] == "https://example.com/"
    assert output["status"] == "safe"

    args = build_parser().parse_args(["classify", "http://1.2.3.4/@x"])
    assert await run_command(args, config) == 2


@pytest.mark.asyncio
async def test_list_commands(config, capsys):
    parser = build_parser()
    await run_command(parser.parse_args(["block", "phish.example"]), config)
    await run_command(parser.parse_args(["allow", "corp.example"]), config)
    capsys.readouterr()

    await run_command(parser.parse_args(["lists"]), config)
    assert json.loads(capsys.readouterr().out) == {
        "whitelist": ["corp.example"],
        "blacklist": ["phish.example"],
    }

    await run_command(parser.parse_args(["unlist", "phish.example"]), config)
    assert "removed" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_stats_and_history_commands(config, capsys):
    parser = build_parser()
    await run_command(parser.parse_args(["classify", "https://example.com/"]), config)
    capsys.readouterr()

    await run_command(parser.parse_args(["stats"]), config)
    assert json.loads(capsys.readouterr().out)["total_scans"] == 1

    await run_command(parser.parse_args(["history", "--clear"]), config)
    await run_command(parser.parse_args(["history"]), config)
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "History cleared"
    assert json.loads(out.split("\n", 1)[1]) == []

    assert await run_command(parser.parse_args(["clear-cache"]), config) == 0
