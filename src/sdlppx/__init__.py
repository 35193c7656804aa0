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

"""
sdlppx - Trados Studio package converter

Unpacks Trados Studio project packages (.sdlppx) for use in other CAT tools:
bilingual documents, translation memories as TMX and termbases as CSV or
OmegaT glossaries. Packs the translated documents back into a return
package (.sdlrpx).
"""

__version__ = "1.0.0"

from sdlppx.converters.termbase import TermbaseConverter
from sdlppx.converters.tm import TMConverter
from sdlppx.core.packager import PackageTransformer
from sdlppx.core.runner import ConversionRunner, RunReport

__all__ = [
    "ConversionRunner",
    "PackageTransformer",
    "RunReport",
    "TMConverter",
    "TermbaseConverter",
    "__version__",
]
