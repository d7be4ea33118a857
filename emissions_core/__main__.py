#!/usr/bin/env python3

import os
import sys
import json
import getpass
import argparse
import logging
from typing import Callable, Dict, List

import uvicorn

from emissions_core import settings as _settings
from emissions_core.api.api import create_app, make_store
from emissions_core.state import validator


SYSTEMD_UNIT_TEMPLATE = """[Unit]
Description=Emissions core REST API server
After=network-online.target
Wants=network-online.target

[Service]
Type=simple
ExecStart={executable} -m emissions_core run
User={user}
WorkingDirectory={directory}
Restart=always
SyslogIdentifier=emissions_core

[Install]
WantedBy=multi-user.target
"""

REPORT_TABLE_COLUMNS = ["id", "title", "co2_total", "status", "updated_at", "etag"]


def _add_init_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--database",
        type=str,
        metavar="url",
        help="Database connection URL including scheme and auth (default: keep reports in memory)"
    )
    parser.add_argument(
        "--config",
        type=str,
        metavar="path",
        help="Path of the new config file (default: the first config search path)"
    )


def _add_reports_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--json", action="store_true", help="Print the reports as JSON array")
    parser.add_argument("--indent", type=int, metavar="n", help="Indent the JSON output with n spaces")


def _add_run_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--host", type=str, metavar="host", help="Bind to this host (overwrites config)")
    parser.add_argument("--port", type=int, metavar="port", help="Bind to this TCP port (overwrites config)")
    parser.add_argument(
        "--config",
        type=str,
        metavar="path",
        default="config.json",
        help="Config file which precedes all other search paths (default: 'config.json')"
    )
    parser.add_argument("--debug", action="store_true", help="Log everything on DEBUG level")
    parser.add_argument("--debug-sql", action="store_true", help="Log all SQL statements (overwrites config)")
    parser.add_argument("--reload", action="store_true", help="Restart the server on source code changes")
    parser.add_argument(
        "--workers",
        type=int,
        metavar="n",
        help="Number of worker processes (without a configured database, "
             "every worker process owns its own set of reports)"
    )
    parser.add_argument("--no-access-log", action="store_true", help="Disable the access log")
    parser.add_argument("--use-colors", action="store_true", help="Colorize the log output")
    parser.add_argument("--root-path", type=str, default="", metavar="p", help="Serve the API below this path")


def _add_systemd_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--force", action="store_true", help="Overwrite an existing unit file")
    parser.add_argument(
        "--path",
        type=str,
        default=os.path.join(os.path.abspath("."), "emissions_core.service"),
        metavar="p",
        help="Path of the new systemd unit file"
    )


def get_parser(program: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=program)
    commands = parser.add_subparsers(
        description="Available sub-commands: init, reports, run, systemd",
        dest="command",
        required=True,
        metavar="<command>",
        help="the sub-command to be executed"
    )

    for name, description, add_arguments in [
        ("init", "Create a new config file", _add_init_arguments),
        ("reports", "Show all current reports together with their entity tags", _add_reports_arguments),
        ("run", "Serve the REST API with the 'uvicorn' ASGI server", _add_run_arguments),
        ("systemd", "Create a systemd unit file to run the REST API as system service", _add_systemd_arguments)
    ]:
        add_arguments(commands.add_parser(name, description=description))
    return parser


def handle_systemd(args: argparse.Namespace) -> int:
    if os.path.exists(args.path) and not args.force:
        print(f"File {args.path!r} already exists. Use '--force' to overwrite it.", file=sys.stderr)
        return 1

    executable = sys.executable
    if not executable:
        executable = "python3"
        print("Check the 'ExecStart' line, the Python interpreter couldn't be determined.", file=sys.stderr)

    with open(args.path, "w") as f:
        f.write(SYSTEMD_UNIT_TEMPLATE.format(
            executable=executable,
            user=getpass.getuser(),
            directory=os.path.abspath(".")
        ))

    print(
        f"Created the unit file {args.path!r}. Link it into /lib/systemd/system/, "
        f"run 'systemctl daemon-reload' and enable the new service afterwards."
    )
    return 0


def run_server(args: argparse.Namespace) -> int:
    _settings.CONFIG_PATHS.insert(0, args.config)
    try:
        settings = _settings.load_settings()
    except ValueError:
        return 1

    if args.debug:
        print("Debug mode is not meant for production!", file=sys.stderr)
        settings.logging.root["level"] = "DEBUG"
        for handler in settings.logging.handlers.values():
            handler["level"] = "DEBUG"
    if args.debug_sql:
        settings.database.debug_sql = True

    host = args.host or settings.server.host
    port = args.port or settings.server.port

    if args.reload or args.workers:
        # Every worker process imports the app and loads the settings on its own
        os.environ["CONFIG_PATH"] = os.path.abspath(args.config)
        app = "emissions_core.api:api.app"
    else:
        app = create_app(settings=settings)

    logging.getLogger("emissions_core").info(f"Serving the API at {host}:{port}")
    uvicorn.run(
        app,
        host=host,
        port=port,
        reload=args.reload,
        workers=args.workers,
        log_level="debug" if args.debug else "info",
        log_config=settings.logging.model_dump(),
        access_log=not args.no_access_log,
        use_colors=args.use_colors,
        proxy_headers=True,
        root_path=args.root_path
    )
    return 0


def init_project(args: argparse.Namespace) -> int:
    path = args.config or _settings.CONFIG_PATHS[0]
    if os.path.exists(path):
        print(f"Keeping the existing config file {path!r}. Remove it first to start over.", file=sys.stderr)
        return 0

    conf = _settings.store_configuration(
        _settings.default_core_config(_settings.get_db_from_env(args.database)),
        path
    )
    print(f"Created the config file {path!r}.")
    if conf.database.connection is None:
        print("No database configured: every server process keeps its own reports in memory.")
    return 0


def print_table(rows: List[dict], columns: List[str]):
    widths = {c: max([len(c)] + [len(str(row[c])) for row in rows]) for c in columns}
    print(" | ".join(c.ljust(widths[c]) for c in columns))
    print("-+-".join("-" * widths[c] for c in columns))
    for row in rows:
        print(" | ".join(str(row[c]).ljust(widths[c]) for c in columns))


def show_reports(args: argparse.Namespace) -> int:
    try:
        settings = _settings.load_settings()
    except ValueError:
        return 1

    rows = [
        dict(report.model_dump(mode="json"), etag=validator.compute_token(report))
        for report in make_store(settings).all()
    ]
    if args.json:
        print(json.dumps(rows, indent=args.indent))
    else:
        print_table(rows, REPORT_TABLE_COLUMNS)
    return 0


COMMANDS: Dict[str, Callable[[argparse.Namespace], int]] = {
    "init": init_project,
    "reports": show_reports,
    "run": run_server,
    "systemd": handle_systemd
}


if __name__ == '__main__':
    namespace = get_parser("emissions_core").parse_args(sys.argv[1:])
    sys.exit(COMMANDS[namespace.command](namespace))
