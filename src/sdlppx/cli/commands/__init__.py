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

"""CLI subcommands for sdlppx.

This module exports all command functions for registration with the main app.
"""

from sdlppx.cli.commands.pack import pack
from sdlppx.cli.commands.termbase import termbase
from sdlppx.cli.commands.tm import tm
from sdlppx.cli.commands.unpack import unpack

__all__ = [
    "pack",
    "termbase",
    "tm",
    "unpack",
]
