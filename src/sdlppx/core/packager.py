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

"""Project package (.sdlppx) to return package (.sdlrpx) transformation.

Flips the descriptor's ``PackageType`` from ``ProjectPackage`` to
``ReturnPackage``, replaces the bilingual documents of the target language
folder with their translated versions, and renames the archive.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path, PurePosixPath

from sdlppx.core.archive import PackageArchive, suffix_filter
from sdlppx.core.descriptor import DESCRIPTOR_SUFFIX, PackageDescriptor
from sdlppx.core.errors import DescriptorError, MissingInputError, PersistenceError
from sdlppx.core.models import PackageType, TransformOutcome
from sdlppx.utils.config import Settings

logger = logging.getLogger(__name__)

PROJECT_PACKAGE_SUFFIX = ".sdlppx"
RETURN_PACKAGE_SUFFIX = ".sdlrpx"
DOCUMENT_SUFFIX = ".sdlxliff"

# Descriptor sits at the archive root, documents directly in the language folder
DESCRIPTOR_DEPTH = 1
DOCUMENT_DEPTH = 1


def return_package_path(path: Path) -> Path:
    """Path of the return package matching a project package."""
    if path.suffix.lower() == PROJECT_PACKAGE_SUFFIX:
        return path.with_suffix(RETURN_PACKAGE_SUFFIX)
    if path.suffix.lower() == RETURN_PACKAGE_SUFFIX:
        return path
    return path.with_name(path.name + RETURN_PACKAGE_SUFFIX)


def find_descriptor(archive: PackageArchive) -> str | None:
    """Locate the project descriptor of a package.

    Returns:
        Entry path of the first descriptor, or None if there is none
    """
    found = archive.find("", DESCRIPTOR_DEPTH, suffix_filter(DESCRIPTOR_SUFFIX))
    if len(found) > 1:
        logger.warning(f"Several descriptors in {archive.path}, using {found[0]}")
    return found[0] if found else None


def read_descriptor(archive: PackageArchive, entry: str) -> PackageDescriptor:
    """Read and parse a descriptor entry.

    Raises:
        DescriptorError: If the descriptor is malformed
    """
    return PackageDescriptor.parse(archive.read(entry))


class PackageTransformer:
    """Turn a project package into a return package.

    Example:
        >>> transformer = PackageTransformer(Settings())
        >>> outcome = transformer.transform("project.sdlppx", "translated/")
        >>> outcome.renamed, outcome.new_path
        (True, PosixPath('project.sdlrpx'))
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    def transform(self, archive_path: str | Path, target_dir: str | Path) -> TransformOutcome:
        """Transform a project package in place.

        Args:
            archive_path: Project package (.sdlppx)
            target_dir: Folder holding the translated bilingual documents

        Returns:
            Outcome; ``renamed`` is False when the package was left unchanged

        Raises:
            MissingInputError: If the package or the target folder is missing
            ArchiveError: If the package cannot be opened
            DescriptorError: If the descriptor cannot be parsed
            PersistenceError: If the backup or the package rewrite fails
        """
        archive_path = Path(archive_path)
        target_dir = Path(target_dir)

        if not archive_path.is_file():
            raise MissingInputError(f"Package file does not exist: {archive_path}")
        if not target_dir.is_dir():
            raise MissingInputError(f"Target directory does not exist: {target_dir}")

        outcome = TransformOutcome(new_path=archive_path)
        with PackageArchive.open(archive_path) as archive:
            descriptor_entry = find_descriptor(archive)
            if descriptor_entry is None:
                self._backup(archive_path)
                logger.warning(f"No {DESCRIPTOR_SUFFIX} file in {archive_path}, nothing to do")
                return outcome

            logger.info(f"Project file: {descriptor_entry}")
            descriptor = read_descriptor(archive, descriptor_entry)
            outcome.target_language = descriptor.target_language
            logger.info(f"Target language: {outcome.target_language}")

            if descriptor.package_type is PackageType.RETURN_PACKAGE:
                self._backup_return_package(archive_path)
                logger.info("This is a return package. Nothing to do.")
                return outcome

            self._backup(archive_path)
            logger.info("This is a project package. Changing to ReturnPackage")
            descriptor.package_type = PackageType.RETURN_PACKAGE
            self._persist_descriptor(archive, descriptor_entry, descriptor)

            if outcome.target_language is None:
                logger.warning("Descriptor has no target language, documents are not replaced")
            else:
                self._replace_documents(archive, outcome, target_dir)

        new_path = return_package_path(archive_path)
        if new_path != archive_path:
            logger.info(f"Renaming {archive_path} to {new_path}")
            try:
                archive_path.replace(new_path)
            except OSError as e:
                self._restore(archive_path)
                raise PersistenceError(f"Failed to rename {archive_path}: {e}") from e

        outcome.renamed = True
        outcome.new_path = new_path
        return outcome

    def _backup_path(self, archive_path: Path) -> Path:
        return archive_path.with_name(archive_path.name + self.settings.backup_suffix)

    def _backup(self, archive_path: Path) -> Path:
        backup = self._backup_path(archive_path)
        try:
            shutil.copy2(archive_path, backup)
        except OSError as e:
            raise PersistenceError(f"Failed to back up {archive_path}: {e}") from e
        logger.debug(f"Backup written to {backup}")
        return backup

    def _backup_return_package(self, archive_path: Path) -> None:
        """Back up a return package unless a project package backup may exist.

        A return package still named ``.sdlppx`` comes from a run that could
        not restore the project package; its backup is the only copy left.
        """
        backup = self._backup_path(archive_path)
        if archive_path.suffix.lower() == PROJECT_PACKAGE_SUFFIX and backup.exists():
            logger.warning(f"Keeping existing backup {backup}")
            return
        self._backup(archive_path)

    def _restore(self, archive_path: Path) -> None:
        """Put the backup back in place after a failed rename."""
        backup = self._backup_path(archive_path)
        try:
            shutil.copy2(backup, archive_path)
        except OSError as e:
            logger.error(f"Failed to restore {archive_path} from {backup}: {e}")
            return
        logger.warning(f"Restored {archive_path} from {backup}")

    def _persist_descriptor(
        self, archive: PackageArchive, entry: str, descriptor: PackageDescriptor
    ) -> None:
        """Stage the updated descriptor into the archive.

        The content goes through a temporary file that is removed when the
        temporary directory scope exits, whatever happens.
        """
        try:
            with tempfile.TemporaryDirectory(prefix="sdlproj_") as tmp_dir:
                tmp_file = Path(tmp_dir) / PurePosixPath(entry).name
                tmp_file.write_bytes(descriptor.to_bytes())
                archive.copy_entry(tmp_file, entry, overwrite=True)
        except (OSError, DescriptorError) as e:
            raise PersistenceError(f"Failed to update {entry}: {e}") from e

    def _replace_documents(
        self, archive: PackageArchive, outcome: TransformOutcome, target_dir: Path
    ) -> None:
        """Replace every bilingual document of the target language folder."""
        assert outcome.target_language is not None
        entries = archive.find(
            outcome.target_language, DOCUMENT_DEPTH, suffix_filter(DOCUMENT_SUFFIX)
        )
        if not entries:
            logger.warning(f"No {DOCUMENT_SUFFIX} files in {outcome.target_language}/")

        for entry in entries:
            source = target_dir / PurePosixPath(entry).name
            logger.info(f"Replace {source} > {entry}")
            try:
                archive.copy_entry(source, entry, overwrite=True)
                outcome.replaced.append(entry)
            except FileNotFoundError:
                logger.warning(f"Translated file not found, keeping original: {source}")
                outcome.missing.append(entry)
