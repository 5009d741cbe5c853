"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version

from modtrack.contracts.project import InstallMode
from modtrack.contracts.view import Partition, SortKey, ViewFilter


def _package_version() -> str:
    try:
        return version("modtrack")
    except PackageNotFoundError:
        return "0.0.0"


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default="./modtrack.json", help="Path to modtrack.json")
    common.add_argument("--profile", default=None, help="Profile id (default: config active_profile)")
    common.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    parser = argparse.ArgumentParser(prog="modtrack")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", parents=[common], help="List tracked projects")

    add_parser = subparsers.add_parser("add", parents=[common], help="Track a repository")
    add_parser.add_argument("url", help="Repository or releases URL")
    add_parser.add_argument(
        "--mode",
        default=InstallMode.AUTO.value,
        choices=[mode.value for mode in InstallMode],
        help="Install mode (default: auto)",
    )
    add_parser.add_argument("--asset-pattern", default=None, help="Regex selecting the release asset")

    remove_parser = subparsers.add_parser("remove", parents=[common], help="Stop tracking a project")
    remove_parser.add_argument("id", type=int)
    remove_parser.add_argument("--delete-files", action="store_true", help="Also delete installed files")

    for name, help_text in (("enable", "Enable a project"), ("disable", "Disable a project")):
        toggle_parser = subparsers.add_parser(name, parents=[common], help=help_text)
        toggle_parser.add_argument("id", type=int)

    branch_parser = subparsers.add_parser("branch", parents=[common], help="Set an addon's git branch")
    branch_parser.add_argument("id", type=int)
    branch_parser.add_argument("name", nargs="?", default=None, help="Branch name (default: master)")

    branches_parser = subparsers.add_parser("branches", parents=[common], help="List remote branches")
    branches_parser.add_argument("id", type=int)

    check_parser = subparsers.add_parser("check", parents=[common], help="Check projects for updates")
    check_parser.add_argument("--retry-failed", action="store_true", help="Recheck failed projects without etags")

    view_parser = subparsers.add_parser("view", parents=[common], help="Check and show a filtered project view")
    view_parser.add_argument("--filter", default=ViewFilter.ALL.value, choices=[item.value for item in ViewFilter])
    view_parser.add_argument("--sort", default=SortKey.NAME.value, choices=[item.value for item in SortKey])
    view_parser.add_argument("--desc", action="store_true", help="Sort descending")
    view_parser.add_argument("--search", default="", help="Whitespace-separated search terms")
    view_parser.add_argument("--partition", default=None, choices=[item.value for item in Partition])

    update_parser = subparsers.add_parser("update", parents=[common], help="Update projects")
    update_parser.add_argument("ids", nargs="*", type=int, help="Project ids (default: all with updates)")
    update_parser.add_argument("--dry-run", action="store_true", required=True, help="Preview mode")
    update_parser.add_argument("--concurrency", type=_positive_int, default=None, help="Parallel installs")

    return parser


__all__ = ["build_parser"]
