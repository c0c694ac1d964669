"""Tests for the application driver and CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from rollingohlc.aggregation.rolling import InvalidPriceError
from rollingohlc.app import RollingOHLCApp
from rollingohlc.cli import cli
from rollingohlc.config_loader import AggregatorConfig, AppConfig, IOConfig, SimulationConfig
from rollingohlc.constants import RecordErrorPolicy


def tick_line(ts: int, ask: str) -> str:
    return json.dumps(
        {
            "e": "bookTicker",
            "u": ts,
            "s": "BTCUSD",
            "b": "1.0",
            "B": "1.0",
            "a": ask,
            "A": "1.0",
            "T": ts,
            "E": ts,
        }
    )


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    path = tmp_path / "data.txt"
    lines = [
        tick_line(0, "100.0"),
        tick_line(10, "102.0"),
        "not json",
        tick_line(20, "99.0"),
        tick_line(25, "abc"),
        tick_line(30, "101.0"),
    ]
    path.write_text("\n".join(lines) + "\n")
    return path


def make_config(input_file: Path, tmp_path: Path, **io_overrides) -> AppConfig:
    return AppConfig(
        aggregator=AggregatorConfig(window_size=60, parallelism=1),
        io=IOConfig(
            input_path=str(input_file),
            output_path=str(tmp_path / "Output.txt"),
            **io_overrides,
        ),
    )


class TestRollingOHLCApp:
    def test_run_skips_bad_records(self, input_file: Path, tmp_path: Path) -> None:
        lines: list[str] = []
        app = RollingOHLCApp(make_config(input_file, tmp_path), echo=lines.append)

        summary = app.run()

        assert summary.ticks_read == 5
        assert summary.ticks_skipped == 2
        assert summary.bars_emitted == 1
        assert lines == [
            "Symbol: BTCUSD, Timestamp: 30, Open: 100.000000, High: 102.000000, "
            "Low: 99.000000, Close: 101.000000"
        ]

        data = json.loads(summary.output_path.read_text())
        assert data == [
            {
                "symbol": "BTCUSD",
                "timestamp": 30,
                "open": "100.000000",
                "high": "102.000000",
                "low": "99.000000",
                "close": "101.000000",
            }
        ]

    def test_fail_on_invalid_price(self, input_file: Path, tmp_path: Path) -> None:
        config = make_config(input_file, tmp_path, on_invalid_price=RecordErrorPolicy.FAIL)
        with pytest.raises(InvalidPriceError):
            RollingOHLCApp(config, echo=lambda _: None).run()

    def test_print_bars_disabled(self, input_file: Path, tmp_path: Path) -> None:
        lines: list[str] = []
        config = make_config(input_file, tmp_path, print_bars=False)
        RollingOHLCApp(config, echo=lines.append).run()
        assert lines == []
        assert (tmp_path / "Output.txt").exists()

    def test_simulate(self) -> None:
        config = AppConfig(
            aggregator=AggregatorConfig(window_size=10_000, parallelism=2),
            simulation=SimulationConfig(symbol="ETHUSDT", seed=7),
            io=IOConfig(print_bars=False),
        )
        summary = RollingOHLCApp(config).simulate(30)

        assert summary.ticks_read == 30
        assert summary.ticks_skipped == 0
        assert summary.bars_emitted > 0
        assert summary.output_path is None


class TestCLI:
    def test_run(self, input_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "bars.json"
        result = CliRunner().invoke(
            cli,
            [
                "run",
                "--config",
                str(tmp_path / "missing.yaml"),
                "--input",
                str(input_file),
                "--output",
                str(output),
                "--window",
                "60",
                "--parallelism",
                "1",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Timestamp: 30" in result.output
        assert len(json.loads(output.read_text())) == 1

    def test_run_missing_input(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            cli,
            [
                "run",
                "--config",
                str(tmp_path / "missing.yaml"),
                "--input",
                str(tmp_path / "nope.txt"),
                "--output",
                str(tmp_path / "out.json"),
            ],
        )
        assert result.exit_code == 1
        assert "Input file not found" in result.output

    def test_simulate(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            cli,
            ["simulate", "--config", str(tmp_path / "missing.yaml"), "--count", "12", "--window", "5000", "--seed", "1"],
        )
        assert result.exit_code == 0, result.output
        assert "Symbol: BTCUSDT" in result.output

    def test_show_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("aggregator:\n  window_size: 15")

        result = CliRunner().invoke(cli, ["show-config", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "window_size: 15" in result.output

    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert result.output.startswith("rollingohlc, version ")
