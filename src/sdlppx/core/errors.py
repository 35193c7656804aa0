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

"""Exceptions raised by package, termbase and translation memory conversion."""

from __future__ import annotations


class SdlppxError(Exception):
    """Base exception for conversion errors."""

    pass


class MissingInputError(SdlppxError, FileNotFoundError):
    """Raised when a package, descriptor or store file is absent."""

    pass


class ArchiveError(SdlppxError):
    """Raised when a package archive cannot be opened or read."""

    pass


class DescriptorError(SdlppxError):
    """Raised when the project descriptor cannot be parsed."""

    pass


class PersistenceError(SdlppxError):
    """Raised when a backup, temporary file or archive rewrite fails."""

    pass


class StoreError(SdlppxError):
    """Raised when a termbase or translation memory store cannot be queried."""

    pass


class MalformedRecordError(SdlppxError):
    """Raised when one row's embedded document cannot be parsed."""

    def __init__(self, record_id: object, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Record {record_id}: {reason}")
