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

"""Termbase and translation memory converters."""

from sdlppx.converters.termbase import TermbaseConverter, join_synonyms, normalize_language
from sdlppx.converters.tm import TMConverter, parse_segment

__all__ = [
    "TMConverter",
    "TermbaseConverter",
    "join_synonyms",
    "normalize_language",
    "parse_segment",
]
