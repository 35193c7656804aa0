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

"""Shared CLI utilities for sdlppx commands."""

from __future__ import annotations

import logging
from typing import Any

from sdlppx.utils.config import Settings, get_settings

# Help text constants
SYNONYMS_HELP = "Synonym layout in termbase exports (column or pipe)"
FORMAT_HELP = "Termbase export format (comma, semicolon, tab or glossary)"
VERBOSE_HELP = "Show debug output"


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Configure logging once per command run.

    Args:
        settings: Settings providing the default log level
        verbose: Force DEBUG level
    """
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(message)s", force=True)


def build_settings(**overrides: Any) -> Settings:
    """Global settings updated with the options given on the command line.

    Options left to None keep the value from the environment.
    """
    updates = {key: value for key, value in overrides.items() if value is not None}
    return get_settings().model_copy(update=updates)
