import argparse
import logging
import sys

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from meshctl.cli.model import import_model, list_models, search_models, view_model
from meshctl.cli.output import Presenter
from meshctl.cli.parser import SUBCOMMANDS, build_parser, build_subcommand_parser
from meshctl.shared.logging import LogConfig
from meshctl.utils.config import LATEST_VERSION, MesheryCtlConfig, Settings, load_mesheryctl_config
from meshctl.utils.errors import (
    APIError,
    InvalidArgumentError,
    MesheryCtlError,
    SelectionCancelledError,
)
from meshctl.utils.http import HTTPClient

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def check_prerequisites(cfg: MesheryCtlConfig, http: HTTPClient) -> None:
    """Make sure the server is up and speaks a version this context expects."""
    http.is_server_running()
    ctx = cfg.get_current_context()
    server_version = None
    if ctx.version and ctx.version != LATEST_VERSION:
        try:
            server_version = http.get_server_version()
        except APIError as e:
            logger.warning(f"Unable to fetch server version: {e}")
    ctx.validate_version(server_version)
    logger.debug(f"Prerequisites met for {http.base_url} (server version: {server_version or 'unchecked'})")


def invalid_subcommand_message(name: str) -> str:
    return (
        f"'{name}' is an invalid subcommand. Please provide required options from "
        f"[{' '.join(SUBCOMMANDS)}]. Use 'meshctl model --help' to display usage guide."
    )


def run_model_command(
    args: argparse.Namespace,
    extra: list[str],
    settings: Settings,
    presenter: Presenter,
) -> int:
    """Validate, check prerequisites and dispatch one ``meshctl model`` invocation."""
    model_parser: argparse.ArgumentParser = args.model_parser

    if args.help:
        if args.subcommand in SUBCOMMANDS:
            build_subcommand_parser(args.subcommand).print_help()
        else:
            model_parser.print_help()
        return EXIT_OK

    if not args.subcommand and not args.count:
        model_parser.print_usage(sys.stderr)
        raise InvalidArgumentError("please provide a subcommand")

    cfg = load_mesheryctl_config(args.config, settings)
    with HTTPClient(
        cfg.get_base_url(),
        cookies=cfg.get_auth_cookies(),
        timeout=settings.REQUEST_TIMEOUT,
        ping_timeout=settings.PING_TIMEOUT,
    ) as http:
        check_prerequisites(cfg, http)

        if args.count:
            list_models(http, presenter, count_only=True)
            return EXIT_OK

        if args.subcommand not in SUBCOMMANDS:
            raise InvalidArgumentError(invalid_subcommand_message(args.subcommand))

        sub_args = build_subcommand_parser(args.subcommand).parse_args(extra)
        if args.subcommand == "list":
            list_models(http, presenter, page=sub_args.page)
        elif args.subcommand == "view":
            view_model(http, presenter, sub_args.name, output_format=sub_args.output_format)
        elif args.subcommand == "search":
            search_models(http, presenter, " ".join(sub_args.query))
        elif args.subcommand == "import":
            import_model(http, presenter, sub_args.file, register=sub_args.register)

    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args, extra = parser.parse_known_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_ERROR
    if extra and args.command != "model":
        parser.error(f"unrecognized arguments: {' '.join(extra)}")

    try:
        settings = Settings()
    except ValidationError as e:
        err_console.print(f"[bold red]Error initializing configuration:[/bold red] {escape(str(e))}")
        return EXIT_ERROR
    # Flags switch logging on; MESHCTL_VERBOSE / MESHCTL_DEBUG can too
    settings.VERBOSE = settings.VERBOSE or args.verbose
    settings.DEBUG = settings.DEBUG or args.debug

    LogConfig.configure(verbose=settings.VERBOSE, debug=settings.DEBUG, log_dir=settings.LOG_DIR)

    presenter = Presenter(console=console, page_size=settings.PAGE_SIZE)
    try:
        return run_model_command(args, extra, settings, presenter)
    except SelectionCancelledError:
        err_console.print("[yellow]Selection cancelled.[/yellow]")
        return EXIT_ERROR
    except MesheryCtlError as e:
        logger.debug("Command failed", exc_info=True)
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        err_console.print()
        return EXIT_INTERRUPTED


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
