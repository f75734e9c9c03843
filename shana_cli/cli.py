"""Shana CLI for running microservices during development.

Provides the `shana run` command.
"""

import logging
import sys

import click

from shana_library import RunOutcome
from shana_library import ShanaError
from shana_library import run_service
from shana_library.config import load_settings

logger = logging.getLogger(__name__)

LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]


def configure_logging(level: str) -> None:
    """Configure root logging for the CLI process."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.group()
def cli():
    """A tool to create, build and debug Shana microservices."""
    pass


class RunCommand(click.Command):
    """Command whose arguments after '--' are collected as go build flags.

    Only the arguments before the separator go through click parsing, so a
    stray positional is a usage error instead of a build flag.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        build_flags: list[str] = []
        if "--" in args:
            index = args.index("--")
            args, build_flags = args[:index], args[index + 1 :]

        rest = super().parse_args(ctx, args)
        ctx.params["build_flags"] = tuple(build_flags)
        return rest

    def collect_usage_pieces(self, ctx: click.Context) -> list[str]:
        return super().collect_usage_pieces(ctx) + ["[-- GO_BUILD_FLAGS...]"]


@cli.command(cls=RunCommand, short_help="Run current microservice as a server")
@click.argument("protocol", metavar="SERVER_PROTO")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default=None, help="Override the configured log level")
def run(protocol: str, build_flags: tuple[str, ...], log_level: str | None):
    """Run current microservice as a local server.

    It's designed to be a development tool, not for production.

    SERVER_PROTO specifies the server protocol used by the service.
    Supported server protocols:

    \b
      - httpjson: Shana-opinioned HTTP JSON server.

    Flags after '--' are passed to 'go build' to build the service.
    """
    try:
        settings = load_settings()
        if log_level:
            settings = settings.model_copy(update={"log_level": log_level})
        configure_logging(settings.log_level)

        outcome = run_service(protocol, build_flags, settings)
        if outcome == RunOutcome.INTERRUPTED:
            logger.info("Service run interrupted")

    except KeyboardInterrupt:
        # Ctrl+C before the pipeline installs its own handler
        click.echo("\nInterrupted")
        sys.exit(0)
    except ShanaError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        import traceback

        click.echo(f"Unexpected error: {e}", err=True)
        click.echo("Traceback:", err=True)
        click.echo(traceback.format_exc(), err=True)
        sys.exit(1)


def main():
    """Entry point for shana CLI."""
    cli()


if __name__ == "__main__":
    main()
