"""Command-line interface for modtrack."""

from __future__ import annotations

import asyncio
import logging as logging

from modtrack import ModTrack as ModTrack
from modtrack import load_config as load_config
from modtrack.cli.app import main as main
from modtrack.cli.commands import check as check_command
from modtrack.cli.commands import projects as projects_command
from modtrack.cli.commands import update as update_command
from modtrack.cli.parser import _package_version as _parser_package_version
from modtrack.cli.parser import build_parser as build_parser
from modtrack.cli.prompts import QuestionaryConfirmation as QuestionaryConfirmation

_format_check_summary = check_command.format_check_summary

_run_list = projects_command.run_list
_run_add = projects_command.run_add
_run_remove = projects_command.run_remove
_run_toggle = projects_command.run_toggle
_run_branch = projects_command.run_branch
_run_branches = projects_command.run_branches
_run_check = check_command.run_check
_run_view = check_command.run_view
_run_update = update_command.run_update

_package_version = _parser_package_version
