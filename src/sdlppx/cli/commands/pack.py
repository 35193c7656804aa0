# Copyright 2025 KTTC AI (https://github.com/kttc-ai)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Pack command: turn a project package into a return package."""

from __future__ import annotations

from pathlib import Path

import typer

from sdlppx.cli.utils import VERBOSE_HELP, build_settings, configure_logging
from sdlppx.core.runner import ConversionRunner
from sdlppx.utils.console import print_info, print_run_report, print_success, print_warning


def pack(
    package: Path = typer.Argument(..., help="Project package (.sdlppx)"),
    target_dir: Path = typer.Argument(
        ..., help="Folder holding the translated .sdlxliff documents"
    ),
    verbose: bool = typer.Option(False, "--verbose", help=VERBOSE_HELP),
) -> None:
    """
    Turn a project package into a return package.

    The descriptor is switched to ReturnPackage, the documents of the target
    language folder are replaced by their translations, and the package is
    renamed to .sdlrpx. A backup copy is written first.

    Example:
        sdlppx pack project.sdlppx translated/
    """
    settings = build_settings()
    configure_logging(settings, verbose)

    report = ConversionRunner(settings).pack(package, target_dir)
    print_run_report(report)

    outcome = report.transform
    if outcome is not None:
        for entry in outcome.missing:
            print_warning(f"No translation for {entry}, original kept")
        if outcome.renamed:
            print_success(f"Return package written: {outcome.new_path}")
        else:
            print_info(f"Package left unchanged: {outcome.new_path}")

    if report.exit_code:
        raise typer.Exit(code=report.exit_code)
