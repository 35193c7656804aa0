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

"""Core package handling and data models."""

from sdlppx.core.archive import PackageArchive, suffix_filter
from sdlppx.core.descriptor import PackageDescriptor
from sdlppx.core.errors import (
    ArchiveError,
    DescriptorError,
    MalformedRecordError,
    MissingInputError,
    PersistenceError,
    SdlppxError,
    StoreError,
)
from sdlppx.core.models import (
    Concept,
    OutputFormat,
    PackageType,
    Segment,
    SynonymLayout,
    TagKind,
    TagMarker,
    Term,
    TermBase,
    TermGroup,
    TextNode,
    TMHeader,
    TransformOutcome,
    TranslationUnit,
)
from sdlppx.core.packager import PackageTransformer
from sdlppx.core.store import RowStore, open_row_store

# The conversion runner depends on the converters; import it from
# sdlppx.core.runner directly

__all__ = [
    "ArchiveError",
    "Concept",
    "DescriptorError",
    "MalformedRecordError",
    "MissingInputError",
    "OutputFormat",
    "PackageArchive",
    "PackageDescriptor",
    "PackageTransformer",
    "PackageType",
    "PersistenceError",
    "RowStore",
    "SdlppxError",
    "Segment",
    "StoreError",
    "SynonymLayout",
    "TMHeader",
    "TagKind",
    "TagMarker",
    "Term",
    "TermBase",
    "TermGroup",
    "TextNode",
    "TransformOutcome",
    "TranslationUnit",
    "open_row_store",
    "suffix_filter",
]
