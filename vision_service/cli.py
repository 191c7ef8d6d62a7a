"""
Command-line entry point for the vision service.
"""
import sys
import logging
from typing import List, Optional

import click

from vision_service.app import create_app
from vision_service.config import load_config
from vision_service.exceptions import LifecycleError
from vision_service.headless import run_headless
from vision_service.interactive import InteractiveConsole
from vision_service.lifecycle import LifecycleController
from vision_service.logging_setup import configure_logging
from vision_service.telemetry import setup_telemetry

logger = logging.getLogger(__name__)


@click.command(
    name="vision-service",
    short_help="Computer Vision Service for line detection",
    help=(
        "A service for computer vision capabilities to identify lines of people "
        "and vehicles for order processing."
    ),
)
@click.option("--headless", "-H", is_flag=True, default=False, help="Run service in headless mode")
@click.pass_context
def cli(ctx: click.Context, headless: bool):
    """Run the service interactively, or headless until SIGINT/SIGTERM."""
    config = load_config()
    configure_logging(config.log_level)
    telemetry = setup_telemetry(config)
    controller = LifecycleController(config, lambda: create_app(config, telemetry))

    try:
        if headless:
            run_headless(controller)
        else:
            InteractiveConsole(controller).run()
    except LifecycleError as e:
        logger.critical(e.message, extra={"error": e.to_dict()})
        ctx.exit(1)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
        try:
            controller.stop()
        except LifecycleError as e:
            logger.critical(e.message, extra={"error": e.to_dict()})
            ctx.exit(1)
    finally:
        telemetry.shutdown()


def main(argv: Optional[List[str]] = None) -> None:
    """Console script entry point; command-line errors exit with status 1."""
    try:
        rv = cli.main(args=argv, prog_name="vision-service", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(rv if isinstance(rv, int) else 0)
