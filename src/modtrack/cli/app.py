"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from modtrack import (
    AuthenticationError,
    ConfigError,
    ConflictError,
    ForgeError,
    InstallError,
    NetworkError,
    ValidationError,
)


def main(argv: list[str] | None = None) -> int:
    import modtrack.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    commands = {
        "list": cli._run_list,
        "add": cli._run_add,
        "remove": cli._run_remove,
        "enable": cli._run_toggle,
        "disable": cli._run_toggle,
        "branch": cli._run_branch,
        "branches": cli._run_branches,
        "check": cli._run_check,
        "view": cli._run_view,
        "update": cli._run_update,
    }

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        return cli.asyncio.run(commands[args.command](args))
    except (ConfigError, ValidationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except (AuthenticationError, NetworkError, ForgeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except (ConflictError, InstallError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover - defensive fallback
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
