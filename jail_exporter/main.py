#!/usr/bin/env python3
"""Main entrypoint for the jail exporter."""

import argparse
import json
import logging
import sys
from os import environ
from typing import cast

from pydantic import ValidationError

from jail_exporter import __version__, constants
from jail_exporter.collector import Exporter
from jail_exporter.errors import (
    BindError,
    CollectionError,
    ConfigurationError,
    PreflightError,
    RenderError,
)
from jail_exporter.file_writer import write_metrics
from jail_exporter.httpd import Server
from jail_exporter.preflight import run_preflight_checks
from jail_exporter.settings import ExporterSettings
from jail_exporter.validators import (
    argparse_type,
    validate_filesystem_path,
    validate_socket_address,
    validate_telemetry_path,
)


class Args(argparse.Namespace):
    output_file_path: str | None
    web_listen_address: str
    web_telemetry_path: str
    log_level: str
    rich_logs: bool
    print_config_and_exit: bool


logger = logging.getLogger(__name__)


def env_default(name: str, default: str | None = None) -> str | None:
    """Return the JAIL_EXPORTER_ prefixed environment variable or the default."""
    return environ.get(constants.ENV_PREFIX + name, default)


def parse_args() -> Args:
    """Parse command line arguments, falling back to the environment.

    Explicit flags win over environment variables, which win over the
    built-in defaults. String defaults go through the same ``type=``
    validator as flags, so values from the environment are checked too.
    """
    parser = argparse.ArgumentParser(
        prog="jail_exporter",
        description="Prometheus exporter for FreeBSD jail metrics as reported by rctl(8)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--output.file-path",
        dest="output_file_path",
        metavar="FILE",
        type=argparse_type(validate_filesystem_path),
        default=env_default("OUTPUT_FILE_PATH"),
        help="File to output metrics to, '-' for stdout. Also accepted in the JAIL_EXPORTER_OUTPUT_FILE_PATH envvar.",
    )

    parser.add_argument(
        "--web.listen-address",
        dest="web_listen_address",
        metavar="[ADDR:PORT]",
        type=argparse_type(validate_socket_address),
        default=env_default(
            "WEB_LISTEN_ADDRESS", constants.DEFAULT_WEB_LISTEN_ADDRESS
        ),
        help="Address on which to expose metrics and web interface. Also accepted in the JAIL_EXPORTER_WEB_LISTEN_ADDRESS envvar.",
    )

    parser.add_argument(
        "--web.telemetry-path",
        dest="web_telemetry_path",
        metavar="PATH",
        type=argparse_type(validate_telemetry_path),
        default=env_default(
            "WEB_TELEMETRY_PATH", constants.DEFAULT_WEB_TELEMETRY_PATH
        ),
        help="Path under which to expose metrics. Also accepted in the JAIL_EXPORTER_WEB_TELEMETRY_PATH envvar.",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set the logging level",
    )

    parser.add_argument(
        "--rich-logs",
        action="store_true",
        help="Enable rich colored logging output",
    )

    parser.add_argument(
        "--print-config-and-exit",
        action="store_true",
        help="Print the resolved configuration as JSON and exit without running the exporter",
    )

    return cast(Args, parser.parse_args())


def configure_logging(log_level: str, use_rich: bool = False) -> None:
    """Configure logging with optional rich formatting.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_rich: Whether to use rich colored logging
    """
    if use_rich:
        from rich.console import Console
        from rich.logging import RichHandler

        logging.basicConfig(
            level=getattr(logging, log_level),
            format="%(message)s",
            datefmt="[%X]",
            handlers=[
                RichHandler(
                    console=Console(stderr=True),
                    show_path=True,
                    show_time=True,
                    show_level=True,
                    rich_tracebacks=True,
                )
            ],
        )
    else:
        logging.basicConfig(
            level=getattr(logging, log_level),
            format="%(asctime)s [%(name)s:%(filename)s:%(lineno)d] %(levelname)s: %(message)s",
        )

    # asyncio logs selector details at debug
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def build_settings(args: Args) -> ExporterSettings:
    """Build the validated settings from the parsed arguments.

    Raises:
        ConfigurationError: Listing every setting that failed validation
    """
    try:
        return ExporterSettings(
            web_listen_address=args.web_listen_address,
            web_telemetry_path=args.web_telemetry_path,
            output_file_path=args.output_file_path,
        )
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid config\n"
            + "\n".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']} (got {err['input']})"
                for err in e.errors()
            )
        ) from e


def main() -> int:
    """Main function."""
    args = parse_args()

    configure_logging(args.log_level, args.rich_logs)

    logger.info("Starting jail_exporter %s", __version__)

    try:
        settings = build_settings(args)
        logger.debug("web.listen-address: %s", settings.web_listen_address)
        logger.debug("web.telemetry-path: %s", settings.web_telemetry_path)

        if args.print_config_and_exit:
            logger.info("Printing resolved configuration")
            print(json.dumps(settings.model_dump(), indent=2, sort_keys=True))
            return 0

        run_preflight_checks()

        if settings.output_file_path is not None:
            logger.debug("output.file-path: %s", settings.output_file_path)
            write_metrics(Exporter(), settings.output_file_path)
            return 0

        Server().bind_address(settings.web_listen_address).telemetry_path(
            settings.web_telemetry_path
        ).run()

    except ConfigurationError as e:
        logger.error("%s", e)
        return 1
    except PreflightError as e:
        logger.error("Preflight check failed: %s", e)
        return 1
    except BindError as e:
        logger.error("Could not start HTTP server: %s", e)
        return 1
    except RenderError as e:
        logger.error("Could not render index page: %s", e)
        return 1
    except CollectionError as e:
        logger.error("Could not collect metrics: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Exporter stopped by user")
        return 0
    except Exception as e:
        logger.error("Error running exporter: %s", e, exc_info=True)
        return 1

    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
