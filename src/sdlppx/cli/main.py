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

"""Main CLI application entry point for sdlppx.

Converts Trados Studio project packages for use in other CAT tools, and
turns them into return packages once translated.

All commands are organized in separate modules under `sdlppx.cli.commands/`.
"""

from __future__ import annotations

import typer

from sdlppx import __version__
from sdlppx.cli.commands import pack, termbase, tm, unpack
from sdlppx.utils.console import console

# Create main app
app = typer.Typer(
    name="sdlppx",
    help="sdlppx - Trados Studio package converter\n\nUnpack project packages to TMX, CSV and OmegaT glossaries, then pack translations back into return packages.",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# Register commands
app.command()(pack)
app.command()(unpack)
app.command()(termbase)
app.command()(tm)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"sdlppx version: [bold cyan]{__version__}[/bold cyan]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: ARG001 - Used by Typer callback
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    sdlppx - Trados Studio package converter.

    Unpack project packages to TMX, CSV and OmegaT glossaries, then pack
    translations back into return packages.
    """
    pass


def run() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    run()
