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

"""Row-oriented stores holding termbases and translation memories.

Translation memories (.sdltm) are SQLite databases. Termbases (.sdltb) are
Microsoft Access databases, read through the optional ``access-parser``
package. The store type is detected from the file header, so a termbase
exported to SQLite is read as well.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from pathlib import Path
from types import TracebackType
from typing import Any

from sdlppx.core.errors import MissingInputError, StoreError

logger = logging.getLogger(__name__)

SQLITE_MAGIC = b"SQLite format 3\x00"
# Jet 3/4 (.mdb) and ACE (.accdb) signatures, at offset 4
ACCESS_MAGICS = (b"Standard Jet DB", b"Standard ACE DB")


class RowStore(ABC):
    """Read-only access to the rows of a database file."""

    def __init__(self, path: Path):
        self.path = path

    @abstractmethod
    def rows(self, table: str, columns: Sequence[str]) -> Iterator[dict[str, Any]]:
        """Iterate the rows of a table.

        Args:
            table: Table name
            columns: Columns to read

        Yields:
            One dictionary per row, keyed by column name

        Raises:
            StoreError: If the table cannot be read
        """

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""

    def __enter__(self) -> RowStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class SQLiteRowStore(RowStore):
    """SQLite database opened read-only."""

    def __init__(self, path: Path):
        super().__init__(path)
        try:
            self.db: sqlite3.Connection | None = sqlite3.connect(
                f"{path.resolve().as_uri()}?mode=ro", uri=True
            )
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open {path}: {e}") from e
        self.db.row_factory = sqlite3.Row

    def rows(self, table: str, columns: Sequence[str]) -> Iterator[dict[str, Any]]:
        if self.db is None:
            raise StoreError(f"Store {self.path} is closed")

        column_list = ", ".join(f'"{column}"' for column in columns)
        try:
            cursor = self.db.execute(f'SELECT {column_list} FROM "{table}"')  # nosec B608
            for row in cursor:
                yield {column: row[column] for column in columns}
        except sqlite3.Error as e:
            raise StoreError(f"Cannot read table {table} from {self.path}: {e}") from e

    def close(self) -> None:
        if self.db is not None:
            self.db.close()
            self.db = None


class AccessRowStore(RowStore):
    """Microsoft Access database, parsed with access-parser."""

    def __init__(self, path: Path):
        super().__init__(path)
        try:
            from access_parser import AccessParser
        except ImportError as e:
            raise RuntimeError(
                "Reading Access termbases requires access-parser. "
                "Install with: pip install 'sdlppx[access]'"
            ) from e

        try:
            self.db: Any = AccessParser(str(path))
        except Exception as e:
            raise StoreError(f"Cannot open {path}: {e}") from e

    def rows(self, table: str, columns: Sequence[str]) -> Iterator[dict[str, Any]]:
        if self.db is None:
            raise StoreError(f"Store {self.path} is closed")

        try:
            data = self.db.parse_table(table)
        except Exception as e:
            raise StoreError(f"Cannot read table {table} from {self.path}: {e}") from e

        missing = [column for column in columns if column not in data]
        if missing:
            raise StoreError(f"Table {table} in {self.path} has no column(s) {missing}")

        for values in zip(*(data[column] for column in columns)):
            yield dict(zip(columns, values, strict=True))

    def close(self) -> None:
        self.db = None


def open_row_store(path: str | Path) -> RowStore:
    """Open a termbase or translation memory store.

    Args:
        path: Database file

    Returns:
        Store matching the file header

    Raises:
        MissingInputError: If the file does not exist
        StoreError: If the file is not a supported database
    """
    path = Path(path)
    if not path.is_file():
        raise MissingInputError(f"Store file not found: {path}")

    with open(path, "rb") as f:
        header = f.read(32)

    if header.startswith(SQLITE_MAGIC):
        logger.debug(f"Opening SQLite store {path}")
        return SQLiteRowStore(path)
    if header[4:19] in ACCESS_MAGICS:
        logger.debug(f"Opening Access store {path}")
        return AccessRowStore(path)

    raise StoreError(f"Unsupported store format: {path}")
