"""Registry commands: list, add, remove, enable/disable and branches."""

from __future__ import annotations

import argparse

from modtrack.cli.common import format_project, format_project_list, open_tracker


async def run_list(args: argparse.Namespace) -> int:
    tracker = open_tracker(args)
    print(f"Profile '{tracker.profile.id}':")
    print(format_project_list(tracker.list_projects()))
    return 0


async def run_add(args: argparse.Namespace) -> int:
    tracker = open_tracker(args)
    project_id = tracker.add_project(args.url, args.mode, asset_pattern=args.asset_pattern)
    print(f"Tracking #{project_id}:")
    print(format_project(tracker.get_project(project_id)))
    return 0


async def run_remove(args: argparse.Namespace) -> int:
    tracker = open_tracker(args)
    project = await tracker.remove_project(args.id, remove_local_files=args.delete_files)
    print(f"Removed #{project.id} {project.label}")
    return 0


async def run_toggle(args: argparse.Namespace) -> int:
    tracker = open_tracker(args)
    project = tracker.set_enabled(args.id, args.command == "enable")
    print(format_project(project))
    return 0


async def run_branch(args: argparse.Namespace) -> int:
    tracker = open_tracker(args)
    project = tracker.set_branch(args.id, args.name)
    print(f"#{project.id} {project.label} now tracks branch '{project.effective_branch}'")
    return 0


async def run_branches(args: argparse.Namespace) -> int:
    tracker = open_tracker(args)
    branches = await tracker.list_branches(args.id)
    current = tracker.get_project(args.id).effective_branch
    for branch in branches:
        marker = "*" if branch == current else " "
        print(f"{marker} {branch}")
    return 0
