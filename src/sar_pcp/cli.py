"""CLI commands for sar-pcp."""

import json
from pathlib import Path

import click


@click.group()
@click.version_option(package_name="sar-pcp")
def main() -> None:
    """Turn system activity counter samples into per-interval metrics."""
    pass


@main.command()
@click.argument("previous", type=click.Path(path_type=Path))
@click.argument("current", type=click.Path(path_type=Path))
@click.option(
    "--interval",
    "-i",
    type=click.IntRange(min=0),
    default=None,
    help="Elapsed time in 1/100 s (default: difference of the samples' uptime_cs)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file (default: ~/.config/sar-pcp/config.toml)",
)
@click.option("--format", "-f", "fmt", type=click.Choice(["text", "json"]), default="text")
@click.option("--verbose", "-v", is_flag=True, help="Print a summary of the export pass")
@click.option("--log-file", is_flag=True, help="Write debug events to the JSON log file")
def export(
    previous: Path,
    current: Path,
    interval: int | None,
    config_path: Path | None,
    fmt: str,
    verbose: bool,
    log_file: bool,
) -> None:
    """Export the metrics between two sample files."""
    import logging

    from sar_pcp import logging as console
    from sar_pcp.config import Config
    from sar_pcp.engine import StatsExporter, UnknownActivityError
    from sar_pcp.samplefile import SampleFileError, interval_between, load_sample
    from sar_pcp.sink import ListSink

    try:
        config = Config.load(config_path)
        prev_sample = load_sample(previous)
        curr_sample = load_sample(current)
    except (SampleFileError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    if log_file:
        console.configure(config, level=logging.DEBUG)
    else:
        console.configure_console()

    if verbose:
        console.sample_loaded(str(previous), len(prev_sample.activities))
        console.sample_loaded(str(current), len(curr_sample.activities))

    if interval is None:
        interval = interval_between(prev_sample, curr_sample)

    sink = ListSink()
    try:
        exporter = StatsExporter(sink, config.export_options(curr_sample.nr_cpu_ini))
        # An activity missing from the current sample has nothing to export
        prev_sample.push_into(exporter, only=curr_sample.activities)
        curr_sample.push_into(exporter)
    except (UnknownActivityError, TypeError) as e:
        console.export_failed(str(e))
        raise click.ClickException(str(e)) from e

    summary = exporter.export(interval)

    if fmt == "json":
        click.echo(json.dumps([r.to_dict() for r in sink.records], indent=2))
    else:
        for record in sink.records:
            click.echo(str(record))

    if verbose:
        console.export_complete(summary)


@main.command()
@click.option("--activity", "-a", default=None, help="Only list metrics of this activity")
def metrics(activity: str | None) -> None:
    """List every metric that can be exported."""
    from sar_pcp.catalog import METRICS, metrics_for
    from sar_pcp.engine import UnknownActivityError, get_activity

    if activity is not None:
        try:
            get_activity(activity)
        except UnknownActivityError as e:
            raise click.ClickException(str(e)) from e
        defs = metrics_for(activity)
    else:
        defs = list(METRICS)

    click.echo(f"{'Metric':40}  {'Activity':10}  {'Instances':10}  {'Units':8}")
    click.echo("-" * 74)
    for d in defs:
        click.echo(f"{d.name:40}  {d.activity:10}  {d.indom or '-':10}  {d.units:8}")


@main.group()
def config() -> None:
    """Manage configuration."""
    pass


@config.command("show")
def config_show() -> None:
    """Display current configuration."""
    from sar_pcp.config import Config

    try:
        cfg = Config.load()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Config file: {cfg.config_path}")
    click.echo(f"Exists: {cfg.config_path.exists()}")
    click.echo("")
    click.echo("[export]")
    click.echo(f"  activities = {cfg.export.activities}")
    click.echo("")
    click.echo("[cpu]")
    click.echo(f"  cpus = {cfg.cpu.cpus or 'all'}")
    click.echo(f"  include_all = {cfg.cpu.include_all}")
    click.echo("")
    click.echo("[memory]")
    click.echo(f"  show_memory = {cfg.memory.show_memory}")
    click.echo(f"  show_swap = {cfg.memory.show_swap}")
    click.echo(f"  extended = {cfg.memory.extended}")
    click.echo("")
    click.echo("[network]")
    click.echo(f"  interfaces = {cfg.network.interfaces or 'all'}")


@config.command("path")
def config_path_cmd() -> None:
    """Print the config file path."""
    from sar_pcp.config import Config

    click.echo(str(Config().config_path))


@config.command("reset")
@click.confirmation_option(prompt="Reset config to defaults?")
def config_reset() -> None:
    """Reset configuration to defaults."""
    from sar_pcp import logging as console
    from sar_pcp.config import Config

    cfg = Config()
    cfg.save()
    console.config_created(str(cfg.config_path))
    click.echo(f"Config reset to defaults: {cfg.config_path}")
