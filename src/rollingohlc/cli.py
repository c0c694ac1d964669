"""rollingohlc CLI."""

import sys

import click
import yaml

from rollingohlc import __version__
from rollingohlc.app import RollingOHLCApp, setup_logging
from rollingohlc.config_loader import load_config_with_overrides
from rollingohlc.constants import APP_NAME, DEFAULT_CONFIG_PATH

config_option = click.option(
    "--config",
    type=click.Path(dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to configuration file (defaults are used if it does not exist)",
)


@click.group()
@click.version_option(__version__, prog_name=APP_NAME)
def cli():
    """Rolling-window OHLC aggregation over book ticker streams."""
    pass


@cli.command()
@config_option
@click.option("--input", "input_path", type=click.Path(dir_okay=False), help="Book ticker file, one JSON object per line")
@click.option("--output", "output_path", type=click.Path(dir_okay=False), help="Where to write the JSON array of bars")
@click.option("--window", type=int, help="Window size, in the unit of the tick timestamps")
@click.option("--parallelism", type=int, help="Number of chunk workers")
@click.option("--quiet", is_flag=True, help="Do not print bars to the console")
def run(config, input_path, output_path, window, parallelism, quiet):
    """Aggregate a book ticker file into OHLC bars."""
    try:
        cfg = load_config_with_overrides(
            config,
            window_size=window,
            parallelism=parallelism,
            input_path=input_path,
            output_path=output_path,
        )
        if quiet:
            cfg.io.print_bars = False

        setup_logging(cfg)
        summary = RollingOHLCApp(cfg, echo=click.echo).run()
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)

    click.echo(str(summary), err=True)


@cli.command()
@config_option
@click.option("--count", default=100, show_default=True, help="Number of synthetic ticks")
@click.option("--window", type=int, help="Window size, in milliseconds of simulated time")
@click.option("--seed", type=int, help="Random seed for a reproducible walk")
@click.option("--quiet", is_flag=True, help="Do not print bars to the console")
def simulate(config, count, window, seed, quiet):
    """Run the aggregator over a synthetic random-walk feed."""
    try:
        cfg = load_config_with_overrides(config, window_size=window)
        if seed is not None:
            cfg.simulation.seed = seed
        if quiet:
            cfg.io.print_bars = False

        setup_logging(cfg)
        summary = RollingOHLCApp(cfg, echo=click.echo).simulate(count)
    except Exception as e:
        click.echo(f"Simulation failed: {e}", err=True)
        sys.exit(1)

    click.echo(str(summary), err=True)


@cli.command("show-config")
@config_option
def show_config(config):
    """Print the effective configuration."""
    try:
        cfg = load_config_with_overrides(config)
    except Exception as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    click.echo(yaml.safe_dump(cfg.model_dump(mode="json"), default_flow_style=False, sort_keys=False))


# Alias for __main__.py
main = cli

if __name__ == "__main__":
    cli()
