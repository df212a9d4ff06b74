"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from sar_pcp.cli import main
from sar_pcp.config import Config
from tests.conftest import write_sample


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def samples(tmp_path: Path) -> tuple[Path, Path]:
    """Write two consecutive sample files one second apart."""
    prev = write_sample(
        tmp_path / "prev.json",
        1000,
        {
            "pcsw": {"context_switch": 100, "processes": 10},
            "memory": {"tlmkb": 1000, "frmkb": 400},
            "net_dev": [{"interface": "eth0", "rx_bytes": 1024}],
        },
    )
    curr = write_sample(
        tmp_path / "curr.json",
        1100,
        {
            "pcsw": {"context_switch": 300, "processes": 12},
            "memory": {"tlmkb": 1000, "frmkb": 300},
            "net_dev": [
                {"interface": "eth0", "rx_bytes": 3072},
                {"interface": "eth1", "rx_bytes": 999},
            ],
        },
    )
    return prev, curr


class TestExportCommand:
    """Tests for the export command."""

    def test_export_text(self, runner: CliRunner, samples) -> None:
        """export prints one metric value per line."""
        prev, curr = samples
        result = runner.invoke(main, ["export", str(prev), str(curr)])

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert "kernel.all.pswitch 200.000000" in lines
        assert "kernel.all.proc 2.000000" in lines
        assert "mem.util.free 300" in lines
        assert "network.interface.in.bytes[eth0] 2.000000" in lines
        assert "network.interface.in.bytes[eth1] 0.000000" in lines

    def test_export_json(self, runner: CliRunner, samples) -> None:
        """--format json prints a list of records."""
        prev, curr = samples
        result = runner.invoke(main, ["export", str(prev), str(curr), "--format", "json"])

        assert result.exit_code == 0, result.output
        records = json.loads(result.output)
        assert {"name": "kernel.all.pswitch", "instance": None, "value": "200.000000"} in records

    def test_export_interval_override(self, runner: CliRunner, samples) -> None:
        """--interval replaces the uptime difference."""
        prev, curr = samples
        result = runner.invoke(main, ["export", str(prev), str(curr), "-i", "200"])

        assert result.exit_code == 0, result.output
        assert "kernel.all.pswitch 100.000000" in result.output.splitlines()

    def test_export_verbose(self, runner: CliRunner, samples) -> None:
        """--verbose reports the loaded samples and the pass summary."""
        prev, curr = samples
        result = runner.invoke(main, ["export", str(prev), str(curr), "-v"])

        assert result.exit_code == 0, result.output
        assert "Loaded" in result.output
        assert "Exported" in result.output

    def test_export_respects_config(self, runner: CliRunner, samples, tmp_path: Path) -> None:
        """Activities left out of the config are not exported."""
        prev, curr = samples
        config_path = tmp_path / "config.toml"
        config_path.write_text('[export]\nactivities = ["memory"]\n')

        result = runner.invoke(
            main, ["export", str(prev), str(curr), "--config", str(config_path)]
        )

        assert result.exit_code == 0, result.output
        assert all(line.startswith("mem.util.") for line in result.output.splitlines())

    def test_export_log_file(self, runner: CliRunner, samples) -> None:
        """--log-file writes debug events to the JSON log."""
        prev, curr = samples
        result = runner.invoke(main, ["export", str(prev), str(curr), "--log-file"])

        assert result.exit_code == 0, result.output
        assert Config().log_path.exists()

    def test_export_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        """A missing sample file is reported as an error."""
        result = runner.invoke(
            main, ["export", str(tmp_path / "a.json"), str(tmp_path / "b.json")]
        )

        assert result.exit_code == 1
        assert "cannot read file" in result.output

    def test_export_bad_config(self, runner: CliRunner, samples, tmp_path: Path) -> None:
        """An invalid config file is reported as an error."""
        prev, curr = samples
        config_path = tmp_path / "config.toml"
        config_path.write_text('[export]\nactivities = ["gpu"]\n')

        result = runner.invoke(
            main, ["export", str(prev), str(curr), "--config", str(config_path)]
        )

        assert result.exit_code == 1
        assert "Invalid activities" in result.output

    def test_export_bad_config_type(self, runner: CliRunner, samples, tmp_path: Path) -> None:
        """A config value of the wrong type is an error, not a traceback."""
        prev, curr = samples
        config_path = tmp_path / "config.toml"
        config_path.write_text('[system]\nlog_max_bytes = "big"\n')

        result = runner.invoke(
            main, ["export", str(prev), str(curr), "--config", str(config_path)]
        )

        assert result.exit_code == 1
        assert "log_max_bytes must be an integer" in result.output

    def test_export_activity_missing_from_current(
        self, runner: CliRunner, tmp_path: Path
    ) -> None:
        """An activity found only in the previous sample exports nothing."""
        prev = write_sample(tmp_path / "prev.json", 1000, {"pcsw": {"context_switch": 5000}})
        curr = write_sample(tmp_path / "curr.json", 1100, {})

        result = runner.invoke(main, ["export", str(prev), str(curr)])

        assert result.exit_code == 0, result.output
        assert result.output == ""

    def test_export_negative_interval(self, runner: CliRunner, samples) -> None:
        """Negative intervals are rejected."""
        prev, curr = samples
        result = runner.invoke(main, ["export", str(prev), str(curr), "-i", "-5"])
        assert result.exit_code == 2


class TestMetricsCommand:
    """Tests for the metrics command."""

    def test_lists_all_metrics(self, runner: CliRunner) -> None:
        """metrics lists the whole catalog."""
        result = runner.invoke(main, ["metrics"])

        assert result.exit_code == 0
        assert "kernel.all.cpu.user" in result.output
        assert "network.fs.server.getattr" in result.output

    def test_filter_by_activity(self, runner: CliRunner) -> None:
        """--activity restricts the listing."""
        result = runner.invoke(main, ["metrics", "-a", "serial"])

        assert result.exit_code == 0
        assert "serial.overrun" in result.output
        assert "kernel.all.cpu.user" not in result.output

    def test_unknown_activity(self, runner: CliRunner) -> None:
        """An unknown activity is an error."""
        result = runner.invoke(main, ["metrics", "-a", "gpu"])

        assert result.exit_code == 1
        assert "Unknown activity" in result.output


class TestConfigCommand:
    """Tests for the config command group."""

    def test_config_path(self, runner: CliRunner, isolated_home: Path) -> None:
        """config path prints the config file location."""
        result = runner.invoke(main, ["config", "path"])

        assert result.exit_code == 0
        assert result.output.strip() == str(isolated_home / ".config" / "sar-pcp" / "config.toml")

    def test_config_show(self, runner: CliRunner) -> None:
        """config show prints every section."""
        result = runner.invoke(main, ["config", "show"])

        assert result.exit_code == 0
        assert "Exists: False" in result.output
        for section in ("[export]", "[cpu]", "[memory]", "[network]"):
            assert section in result.output

    def test_config_reset(self, runner: CliRunner) -> None:
        """config reset writes the defaults after confirmation."""
        result = runner.invoke(main, ["config", "reset", "--yes"])

        assert result.exit_code == 0
        assert Config().config_path.exists()
        assert Config.load() == Config()

    def test_config_reset_aborted(self, runner: CliRunner) -> None:
        """Declining the prompt leaves the config untouched."""
        result = runner.invoke(main, ["config", "reset"], input="n\n")

        assert result.exit_code == 1
        assert not Config().config_path.exists()


def test_version(runner: CliRunner) -> None:
    """--version prints the package version."""
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
