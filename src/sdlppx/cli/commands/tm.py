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

"""TM command: export a translation memory store to TMX."""

from __future__ import annotations

from pathlib import Path

import typer

from sdlppx.cli.utils import VERBOSE_HELP, build_settings, configure_logging
from sdlppx.converters.tm import TMConverter
from sdlppx.core.runner import STEP_ERRORS
from sdlppx.utils.console import print_error, print_success


def tm(
    source: Path = typer.Argument(..., help="Translation memory store (.sdltm)"),
    output_dir: Path = typer.Argument(..., help="Output folder"),
    verbose: bool = typer.Option(False, "--verbose", help=VERBOSE_HELP),
) -> None:
    """
    Export a translation memory to TMX.

    Example:
        sdlppx tm main.sdltm out/
    """
    settings = build_settings()
    configure_logging(settings, verbose)

    try:
        tm_file = TMConverter(settings).convert(source, output_dir)
    except STEP_ERRORS as e:
        print_error(f"Translation memory export failed: {e}")
        raise typer.Exit(code=1) from e

    print_success(f"Translation memory exported to {tm_file}")
