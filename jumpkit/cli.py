import logging
import sys
from typing import List, Optional, Tuple

import click
from rich.console import Console

from . import __version__
from .core.config import EXAMPLE_CONFIG, load_configuration
from .core.errors import ClientExitError, JumpkitError
from .core.models import ConnectionParams, Outcome
from .utils.logging import setup_logger
from .utils.secrets import lookup_secret


console = Console(stderr=True, highlight=False)

PASSTHROUGH = {"ignore_unknown_options": True, "allow_interspersed_args": False}


def _report(outcomes: List[Outcome]) -> None:
    """Summarise a batch run; exit non-zero when any target failed."""
    if len(outcomes) < 2:
        return
    failed = [o for o in outcomes if not o.ok]
    console.print(f"\n[bold]{len(outcomes) - len(failed)}/{len(outcomes)} succeeded[/bold]")
    if failed:
        sys.exit(1)


def _run(fn, *args, **kwargs) -> List[Outcome]:
    try:
        return fn(*args, **kwargs)
    except ClientExitError as e:
        # the client already reported its own error; keep its status
        sys.exit(e.returncode)
    except JumpkitError as e:
        raise click.ClickException(str(e))


@click.group(help="Find running EC2/RDS instances and connect to them")
@click.version_option(__version__, prog_name="jumpkit")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, envvar="JUMPKIT_CONFIG", help="Configuration file")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], verbose: bool):
    if verbose:
        setup_logger(level=logging.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _configuration(ctx: click.Context):
    try:
        return load_configuration(ctx.obj.get("config_path"))
    except JumpkitError as e:
        raise click.ClickException(str(e))


@main.command("ec2", help="SSH into a running EC2 instance whose Name tag contains FILTER", context_settings=PASSTHROUGH)
@click.option("-o", "--output", is_flag=True, default=False, help="Save the command output of every match to output-<name>-<time>.txt")
@click.option("-a", "--all", "all_", is_flag=True, default=False, help="Run against every matching instance")
@click.option("-j", "--jump", is_flag=True, default=False, help="Go through the jump host even when a public address exists")
@click.argument("filter", default="")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def ec2_cmd(ctx: click.Context, output: bool, all_: bool, jump: bool, filter: str, args: Tuple[str, ...]):
    from .connect.direct import connect_to_compute

    config = _configuration(ctx)
    params = ConnectionParams(filter=filter, args=tuple(args), output=output, all=all_, use_jump_host=jump)
    _report(_run(connect_to_compute, config, params))


@main.command("rds", help="Open a database client on an RDS instance whose endpoint contains FILTER", context_settings=PASSTHROUGH)
@click.option("-a", "--all", "all_", is_flag=True, default=False, help="Run against every matching database")
@click.argument("filter", default="")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def rds_cmd(ctx: click.Context, all_: bool, filter: str, args: Tuple[str, ...]):
    from .connect.tunnel import DatabaseConnector, connect_to_database

    config = _configuration(ctx)
    connector = DatabaseConnector(config, lookup_secret=lookup_secret)
    _report(_run(connect_to_database, config, filter, args, all_mode=all_, connector=connector))


@main.command("config", help="Print an example configuration file")
def config_cmd():
    click.echo(EXAMPLE_CONFIG)


if __name__ == "__main__":
    main()
