"""Command line entry point."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kscan.armoapi import (
    new_armo_api_customized,
    new_armo_api_dev,
    new_armo_api_prod,
    set_armo_api_connector,
)
from kscan.tenantconfig import get_value_from_config_json, set_key_value_in_config_json
from kscan.versioncheck import new_version_check_handler, new_version_check_request

_log = logging.getLogger(__name__)

BUILD_NUMBER = ""

ENV_FLAG_USAGE = (
    "Send report results to specific URL. Format:<ReportReceiver>,<Backend>,<Frontend>.\n"
    "\t\tExample:report.armo.cloud,api.armo.cloud,portal.armo.cloud"
)


@dataclass
class DownloadInfo:
    """Where and what to download."""

    path: str = ""
    framework_name: str = ""
    control_name: str = ""


class EnvironmentFlagError(ValueError):
    """Raised when the ``--environment`` flag is malformed."""


def init_armo_be_connector(environment: str) -> None:
    """Choose the backend from ``dev``, nothing, or three comma separated hosts."""
    urls = environment.split(",")
    if len(urls) > 3:
        raise EnvironmentFlagError("Too many URLs")
    if len(urls) == 1:
        if urls[0] == "dev":
            set_armo_api_connector(new_armo_api_dev())
        elif urls[0] == "":
            set_armo_api_connector(new_armo_api_prod())
        else:
            raise EnvironmentFlagError(f"--environment flag usage: {ENV_FLAG_USAGE}")
    elif len(urls) == 2:
        raise EnvironmentFlagError(f"--environment flag usage: {ENV_FLAG_USAGE}")
    else:
        set_armo_api_connector(new_armo_api_customized(urls[0], urls[1], urls[2]))


def parse_key_value(arg: str, expected_parts: int) -> list[str]:
    """Split ``arg`` on ``=`` and require exactly ``expected_parts`` parts."""
    parts = arg.split("=")
    if len(parts) != expected_parts:
        message = "requires  one argument"
        if expected_parts == 2:
            message += ": <key>=<value>"
        raise ValueError(message)
    return parts


def load_results_from_file(file_path: str) -> list[dict[str, Any]]:
    """Read framework reports: a JSON array of them or a single one."""
    data = json.loads(Path(file_path).read_text(encoding="utf-8"))
    if data is None:
        return []
    if isinstance(data, list) and all(isinstance(item, dict) for item in data):
        return data
    if isinstance(data, dict):
        return [data]
    raise ValueError("expected a framework report or a list of framework reports")


def _noop(args: argparse.Namespace) -> int:
    return 0


def _local_get(args: argparse.Namespace) -> int:
    key = parse_key_value(args.key, 1)[0]
    value = get_value_from_config_json(key)
    print(f"{key}={value}")
    return 0


def _local_set(args: argparse.Namespace) -> int:
    key, value = parse_key_value(args.key_value, 2)
    set_key_value_in_config_json(key, value)
    print("Value added successfully.")
    return 0


def _version(args: argparse.Namespace) -> int:
    checker = new_version_check_handler(BUILD_NUMBER)
    try:
        checker.check_latest_version(new_version_check_request(BUILD_NUMBER, "", "", "version"))
    except RuntimeError as exc:
        _log.debug("%s", exc)
    print("Your current version is: " + BUILD_NUMBER)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all commands."""
    parser = argparse.ArgumentParser(
        prog="kubescape",
        description="Kubescape is a tool for testing Kubernetes security posture",
    )
    parser.add_argument(
        "--account",
        default="",
        help="Armo portal account ID. Default will load account ID from configMap or config file",
    )
    parser.add_argument("--environment", default="", help=argparse.SUPPRESS)
    commands = parser.add_subparsers(dest="command")

    config = commands.add_parser("config", help="Set configuration")
    config.set_defaults(handler=_noop)
    config_commands = config.add_subparsers(dest="config_command")

    local = config_commands.add_parser("local", help="Set configuration locally (for config.json)")
    local.set_defaults(handler=_noop)
    local_commands = local.add_subparsers(dest="local_command")

    local_get = local_commands.add_parser("get", help="Get configuration locally")
    local_get.add_argument("key", metavar="<key>")
    local_get.set_defaults(handler=_local_get)

    local_set = local_commands.add_parser("set", help="Set configuration locally")
    local_set.add_argument("key_value", metavar="<key>=<value>")
    local_set.set_defaults(handler=_local_set)

    version = commands.add_parser("version", help="Get current version")
    version.set_defaults(handler=_version)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command line and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    try:
        init_armo_be_connector(args.environment)
        return handler(args)
    except (LookupError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())