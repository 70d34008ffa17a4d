from __future__ import annotations

import argparse
import json
from typing import Sequence

from envrun import __version__
from envrun.core.config import get_runtime_config
from envrun.core.dispatcher import CommandDispatcher
from envrun.core.environment import EnvironmentSetup
from envrun.core.errors import EnvrunError, format_error
from envrun.core.logging import configure_logging
from envrun.core.paths import settings_path
from envrun.core.settings_store import Settings, SettingsStore
from envrun.core.ui import UIContext, UserInterface
from envrun.domain.invocation import Invocation
from envrun.services.in_process_loader import InProcessLoader
from envrun.services.process_replacer import ProcessReplacer
from envrun.services.shebang import ShebangSniffer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="envrun",
        description="Run commands inside the configured Python environment.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Print version and exit.",
    )

    subparsers = parser.add_subparsers(dest="command")

    exec_parser = subparsers.add_parser(
        "exec",
        help="Run a command in the context of the environment.",
    )
    exec_parser.add_argument(
        "--keep-file-descriptors",
        action="store_true",
        help="Pass all open file descriptors on to the command.",
    )
    exec_parser.add_argument(
        "argv",
        nargs=argparse.REMAINDER,
        help="Command to run, followed by its arguments.",
    )
    exec_parser.set_defaults(handler=handle_exec)

    config_parser = subparsers.add_parser(
        "print-config",
        help="Print resolved runtime config and settings to stdout.",
    )
    config_parser.set_defaults(handler=handle_print_config)

    return parser


def _load_settings() -> tuple[SettingsStore, Settings]:
    config = get_runtime_config()
    store = SettingsStore(settings_path(config))
    return store, Settings.from_sources(store.load(), config)


def handle_exec(args: argparse.Namespace) -> None:
    ui = UIContext(UserInterface())
    try:
        _store, settings = _load_settings()
        environment = EnvironmentSetup(settings)
        environment.export()
        dispatcher = CommandDispatcher(
            ui=ui,
            settings=settings,
            sniffer=ShebangSniffer(),
            loader=InProcessLoader(ui, settings, environment.activate),
            replacer=ProcessReplacer(ui),
        )
        invocation = Invocation.from_argv(
            args.argv,
            keep_file_descriptors=args.keep_file_descriptors,
        )
        outcome = dispatcher.run(invocation)
    except EnvrunError as exc:
        message, _severity = format_error(exc)
        ui.error(message)
        if exc.detail:
            ui.error(exc.detail)
        raise SystemExit(exc.exit_code) from None
    raise SystemExit(outcome.exit_code)


def handle_print_config(_args: argparse.Namespace) -> None:
    store, settings = _load_settings()
    payload = {
        "runtime": get_runtime_config().model_dump(mode="json"),
        "settings_path": str(store.path),
        "settings": settings.as_dict(),
    }
    print(json.dumps(payload, indent=2))


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_runtime_config()
    configure_logging(
        level=config.log_level,
        format_name=config.log_format,
        log_dir=config.log_dir,
    )

    if args.command is None:
        parser.print_help()
        return

    args.handler(args)


if __name__ == "__main__":
    main()
