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

"""Package archive navigation.

Opens a zip package as a file tree and supports:
- Finding entries by name at a bounded depth below a folder
- Copying entries out to disk
- Replacing entries with files from disk

Zip entries cannot be rewritten in place. Replacements are buffered in memory
and written on ``close()`` by rebuilding the archive into a temporary sibling
file that then atomically replaces the original.
"""

from __future__ import annotations

import logging
import os
import tempfile
import zipfile
from collections.abc import Callable
from pathlib import Path, PurePosixPath
from types import TracebackType

from sdlppx.core.errors import ArchiveError, MissingInputError, PersistenceError

logger = logging.getLogger(__name__)

EntryPredicate = Callable[[str], bool]


def suffix_filter(suffix: str) -> EntryPredicate:
    """Build a case-insensitive file name suffix predicate.

    Args:
        suffix: Suffix to match (e.g., ".sdlxliff")

    Returns:
        Predicate taking an entry file name
    """
    suffix = suffix.lower()
    return lambda name: name.lower().endswith(suffix)


def _normalize(name: str) -> str:
    return name.replace("\\", "/").strip("/")


class PackageArchive:
    """Zip package opened as a navigable file tree.

    Example:
        >>> with PackageArchive.open("project.sdlppx") as archive:
        ...     for entry in archive.find("fr-FR", 1, suffix_filter(".sdlxliff")):
        ...         archive.copy_entry(Path("translated") / PurePosixPath(entry).name, entry)
    """

    def __init__(self, path: Path, zip_file: zipfile.ZipFile):
        self.path = path
        self._zip: zipfile.ZipFile | None = zip_file
        # Normalized entry path -> name stored in the zip
        self._entries: dict[str, str] = {
            _normalize(info.filename): info.filename
            for info in zip_file.infolist()
            if not info.is_dir()
        }
        self._staged: dict[str, bytes] = {}

    @classmethod
    def open(cls, path: str | Path) -> PackageArchive:
        """Open a package archive.

        Raises:
            MissingInputError: If the file does not exist
            ArchiveError: If the file is not a readable zip archive
        """
        path = Path(path)
        if not path.is_file():
            raise MissingInputError(f"Package file not found: {path}")

        try:
            zip_file = zipfile.ZipFile(path, "r")
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveError(f"Cannot open package {path}: {e}") from e

        logger.debug(f"Opened package {path} ({len(zip_file.infolist())} entries)")
        return cls(path, zip_file)

    def __enter__(self) -> PackageArchive:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            # Do not commit staged replacements after a failure
            self.discard()

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def modified(self) -> bool:
        return bool(self._staged)

    def _require_open(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise ArchiveError(f"Package {self.path} is closed")
        return self._zip

    def find(
        self,
        root: str = "",
        max_depth: int = 1,
        predicate: EntryPredicate | None = None,
    ) -> list[str]:
        """Find entries below a folder.

        Args:
            root: Folder inside the archive ("" for the archive root)
            max_depth: Maximum depth relative to ``root`` (1 = direct children)
            predicate: Filter applied to the entry file name

        Returns:
            Matching entry paths, in archive order
        """
        self._require_open()
        root_path = PurePosixPath(_normalize(root)) if _normalize(root) else None
        found = []

        for entry in self._entries:
            entry_path = PurePosixPath(entry)
            if root_path is not None:
                if not entry_path.is_relative_to(root_path) or entry_path == root_path:
                    continue
                relative = entry_path.relative_to(root_path)
            else:
                relative = entry_path

            if len(relative.parts) > max_depth:
                continue
            if predicate is not None and not predicate(entry_path.name):
                continue
            found.append(entry)

        return found

    def read(self, entry: str) -> bytes:
        """Read the content of an entry, including staged replacements.

        Raises:
            KeyError: If the entry does not exist
        """
        zip_file = self._require_open()
        entry = _normalize(entry)
        if entry in self._staged:
            return self._staged[entry]
        if entry not in self._entries:
            raise KeyError(f"No entry {entry} in {self.path}")
        return zip_file.read(self._entries[entry])

    def copy_entry(self, src: str | Path, dst: str, overwrite: bool = True) -> None:
        """Replace (or add) an archive entry with a file from disk.

        The file is read fully at call time; it may be deleted afterwards.

        Args:
            src: File on disk
            dst: Entry path inside the archive
            overwrite: Whether an existing entry may be replaced

        Raises:
            FileNotFoundError: If ``src`` does not exist
            FileExistsError: If ``dst`` exists and ``overwrite`` is False
        """
        self._require_open()
        dst = _normalize(dst)
        if not overwrite and dst in self._entries:
            raise FileExistsError(f"Entry {dst} already exists in {self.path}")

        self._staged[dst] = Path(src).read_bytes()
        logger.debug(f"Staged {src} > {dst}")

    def extract_entry(self, src: str, dst: str | Path, overwrite: bool = True) -> Path:
        """Copy an archive entry to a file on disk.

        Args:
            src: Entry path inside the archive
            dst: Destination file
            overwrite: Whether an existing file may be replaced

        Returns:
            Destination path

        Raises:
            KeyError: If the entry does not exist
            FileExistsError: If ``dst`` exists and ``overwrite`` is False
        """
        dst = Path(dst)
        if not overwrite and dst.exists():
            raise FileExistsError(f"File already exists: {dst}")

        data = self.read(src)
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_bytes(data)
        return dst

    def discard(self) -> None:
        """Drop staged replacements and close the archive."""
        self._staged.clear()
        self.close()

    def close(self) -> None:
        """Write staged replacements (if any) and release the archive.

        Raises:
            PersistenceError: If the archive cannot be rewritten. The original
                file is left untouched in that case.
        """
        if self._zip is None:
            return

        zip_file, self._zip = self._zip, None
        try:
            if self._staged:
                self._rewrite(zip_file)
        finally:
            zip_file.close()
            self._staged.clear()

    def _rewrite(self, zip_file: zipfile.ZipFile) -> None:
        """Rebuild the archive with staged replacements and swap it in."""
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        os.close(fd)
        tmp_path = Path(tmp_name)
        pending = dict(self._staged)

        try:
            with zipfile.ZipFile(tmp_path, "w") as out:
                for info in zip_file.infolist():
                    entry = _normalize(info.filename)
                    if entry in pending:
                        data = pending.pop(entry)
                    elif info.is_dir():
                        data = b""
                    else:
                        data = zip_file.read(info)
                    out.writestr(_clone_info(info), data)

                # Entries that did not exist before
                for entry, data in pending.items():
                    out.writestr(entry, data, compress_type=zipfile.ZIP_DEFLATED)

            zip_file.close()
            os.replace(tmp_path, self.path)
            logger.info(f"Updated {len(self._staged)} entries in {self.path}")

        except (OSError, zipfile.BadZipFile, NotImplementedError) as e:
            tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Failed to rewrite package {self.path}: {e}") from e
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise


def _clone_info(info: zipfile.ZipInfo) -> zipfile.ZipInfo:
    """Copy the header fields of an entry that survive a rewrite."""
    clone = zipfile.ZipInfo(info.filename, date_time=info.date_time)
    clone.compress_type = info.compress_type
    clone.comment = info.comment
    clone.create_system = info.create_system
    clone.external_attr = info.external_attr
    return clone
