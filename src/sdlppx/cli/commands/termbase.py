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

"""Termbase command: export a termbase store."""

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
from sdlppx.converters.termbase import TermbaseConverter
from sdlppx.core.models import OutputFormat, SynonymLayout
from sdlppx.core.runner import STEP_ERRORS
from sdlppx.utils.console import print_error, print_success


def termbase(
    source: Path = typer.Argument(..., help="Termbase store (.sdltb)"),
    output_dir: Path = typer.Argument(..., help="Output folder"),
    prefix: str | None = typer.Option(
        None, "--prefix", "-p", help="Output file name prefix (default: store name)"
    ),
    synonyms: SynonymLayout | None = typer.Option(None, "--synonyms", help=SYNONYMS_HELP),
    output_format: OutputFormat | None = typer.Option(None, "--format", help=FORMAT_HELP),
    verbose: bool = typer.Option(False, "--verbose", help=VERBOSE_HELP),
) -> None:
    """
    Export a termbase to CSV, tab-delimited text or an OmegaT glossary.

    Example:
        sdlppx termbase physics.sdltb out/ --format comma
    """
    settings = build_settings(synonym_layout=synonyms, output_format=output_format)
    configure_logging(settings, verbose)

    try:
        output_file = TermbaseConverter(settings).convert(
            source, output_dir, prefix or source.stem
        )
    except STEP_ERRORS as e:
        print_error(f"Termbase export failed: {e}")
        raise typer.Exit(code=1) from e

    print_success(f"Termbase exported to {output_file}")
