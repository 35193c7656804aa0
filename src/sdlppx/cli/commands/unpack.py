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

"""Unpack command: extract and convert the content of a project package."""

from __future__ import annotations

from pathlib import Path

import typer

from sdlppx.cli.utils import (
    FORMAT_HELP,
    SYNONYMS_HELP,
    VERBOSE_HELP,
    build_settings,
    configure_logging,
)
from sdlppx.core.errors import SdlppxError
from sdlppx.core.models import OutputFormat, SynonymLayout
from sdlppx.core.runner import ConversionRunner
from sdlppx.utils.console import print_error, print_run_report, print_success


def unpack(
    package: Path = typer.Argument(..., help="Project package (.sdlppx)"),
    output_dir: Path = typer.Argument(..., help="Output folder"),
    skip_glossary: bool = typer.Option(
        False, "--skip-glossary", help="Do not export termbases"
    ),
    skip_tm: bool = typer.Option(False, "--skip-tm", help="Do not export translation memories"),
    skip_sources: bool = typer.Option(
        False, "--skip-sources", help="Do not extract the bilingual documents"
    ),
    synonyms: SynonymLayout | None = typer.Option(None, "--synonyms", help=SYNONYMS_HELP),
    output_format: OutputFormat | None = typer.Option(None, "--format", help=FORMAT_HELP),
    verbose: bool = typer.Option(False, "--verbose", help=VERBOSE_HELP),
) -> None:
    """
    Extract documents, translation memories and termbases from a package.

    Bilingual documents go to OUTPUT_DIR/<target-language>/, translation
    memories to OUTPUT_DIR/tm/ as TMX and termbases to OUTPUT_DIR/glossary/.
    The exit code has one bit set per failed step.

    Example:
        sdlppx unpack project.sdlppx out/ --format semicolon --synonyms pipe
    """
    settings = build_settings(
        skip_glossary=skip_glossary or None,
        skip_translation_memory=skip_tm or None,
        skip_source_documents=skip_sources or None,
        synonym_layout=synonyms,
        output_format=output_format,
    )
    configure_logging(settings, verbose)

    try:
        report = ConversionRunner(settings).unpack(package, output_dir)
    except SdlppxError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_run_report(report)
    if report.exit_code:
        raise typer.Exit(code=report.exit_code)
    print_success(f"Package unpacked to {output_dir}")
