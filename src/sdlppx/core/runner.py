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

"""Conversion runner: packing and unpacking of project packages.

Each step of a run is isolated: a failing step is reported and the next
steps still run. The exit code of a run combines one flag per failed step.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from enum import Enum, IntFlag
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, Field

from sdlppx.converters.termbase import TermbaseConverter
from sdlppx.converters.tm import TMConverter
from sdlppx.core.archive import PackageArchive, suffix_filter
from sdlppx.core.errors import DescriptorError, SdlppxError, StoreError
from sdlppx.core.models import TransformOutcome
from sdlppx.core.packager import (
    DOCUMENT_DEPTH,
    DOCUMENT_SUFFIX,
    PackageTransformer,
    find_descriptor,
    read_descriptor,
)
from sdlppx.utils.config import Settings

logger = logging.getLogger(__name__)

TM_SUFFIX = ".sdltm"
TERMBASE_SUFFIX = ".sdltb"

# Stores usually sit in Tm/<lang>/ or Termbases/ folders
STORE_DEPTH = 3

TM_FOLDER = "tm"
GLOSSARY_FOLDER = "glossary"

# Errors a step recovers from; anything else is a bug and propagates
STEP_ERRORS = (SdlppxError, OSError, RuntimeError, ValueError)


class StepName(str, Enum):
    SOURCES = "sources"
    TRANSLATION_MEMORY = "translation_memory"
    GLOSSARY = "glossary"
    PACKAGE = "package"


class StepStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


class ExitCode(IntFlag):
    """Process exit status flags, one per failing step."""

    OK = 0
    SOURCES = 2
    TRANSLATION_MEMORY = 4
    GLOSSARY = 8
    PACKAGE = 16


_STEP_EXIT_CODES = {
    StepName.SOURCES: ExitCode.SOURCES,
    StepName.TRANSLATION_MEMORY: ExitCode.TRANSLATION_MEMORY,
    StepName.GLOSSARY: ExitCode.GLOSSARY,
    StepName.PACKAGE: ExitCode.PACKAGE,
}


class StepResult(BaseModel):
    """Outcome of one step of a run."""

    name: StepName
    status: StepStatus = Field(default=StepStatus.OK)
    outputs: list[Path] = Field(default_factory=list, description="Files written")
    error: str | None = Field(default=None, description="Failure message")


class RunReport(BaseModel):
    """Outcome of a pack or unpack run."""

    package: Path
    steps: list[StepResult] = Field(default_factory=list)
    transform: TransformOutcome | None = Field(
        default=None, description="Package transformation outcome (pack only)"
    )

    @property
    def failed(self) -> list[StepResult]:
        return [step for step in self.steps if step.status is StepStatus.FAILED]

    @property
    def exit_code(self) -> int:
        """OR of the exit flags of the failed steps, 0 when all succeeded."""
        code = ExitCode.OK
        for step in self.failed:
            code |= _STEP_EXIT_CODES[step.name]
        return int(code)


class ConversionRunner:
    """Run package conversions step by step.

    Example:
        >>> runner = ConversionRunner(Settings(skip_glossary=True))
        >>> report = runner.unpack("project.sdlppx", "out/")
        >>> report.exit_code
        0
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    def pack(self, package: str | Path, target_dir: str | Path) -> RunReport:
        """Turn a project package into a return package.

        Args:
            package: Project package (.sdlppx)
            target_dir: Folder holding the translated bilingual documents

        Returns:
            Report with a single ``package`` step
        """
        package = Path(package)
        report = RunReport(package=package)

        def transform(step: StepResult) -> None:
            outcome = PackageTransformer(self.settings).transform(package, target_dir)
            report.transform = outcome
            if outcome.renamed:
                step.outputs.append(outcome.new_path)

        report.steps.append(self._run_step(StepName.PACKAGE, False, transform))
        return report

    def unpack(self, package: str | Path, output_dir: str | Path) -> RunReport:
        """Extract sources and convert stores out of a project package.

        The package is opened read-only. Steps run in order (sources,
        translation memory, glossary), each one skippable from the settings.

        Raises:
            MissingInputError: If the package does not exist
            ArchiveError: If the package cannot be opened
        """
        package = Path(package)
        output_dir = Path(output_dir)
        report = RunReport(package=package)
        settings = self.settings

        with PackageArchive.open(package) as archive:
            report.steps.append(
                self._run_step(
                    StepName.SOURCES,
                    settings.skip_source_documents,
                    lambda step: self._extract_sources(archive, output_dir, step),
                )
            )
            report.steps.append(
                self._run_step(
                    StepName.TRANSLATION_MEMORY,
                    settings.skip_translation_memory,
                    lambda step: self._convert_stores(
                        archive, TM_SUFFIX, step, self._convert_tm(output_dir / TM_FOLDER)
                    ),
                )
            )
            report.steps.append(
                self._run_step(
                    StepName.GLOSSARY,
                    settings.skip_glossary,
                    lambda step: self._convert_stores(
                        archive,
                        TERMBASE_SUFFIX,
                        step,
                        self._convert_termbase(output_dir / GLOSSARY_FOLDER, package.stem),
                    ),
                )
            )

        if report.failed:
            logger.warning(f"{len(report.failed)} step(s) failed for {package}")
        return report

    @staticmethod
    def _run_step(
        name: StepName, skip: bool, action: Callable[[StepResult], None]
    ) -> StepResult:
        step = StepResult(name=name)
        if skip:
            logger.info(f"Skipping step {name.value}")
            step.status = StepStatus.SKIPPED
            return step

        try:
            action(step)
        except STEP_ERRORS as e:
            logger.error(f"Step {name.value} failed: {e}")
            step.status = StepStatus.FAILED
            step.error = str(e)
        return step

    def _extract_sources(
        self, archive: PackageArchive, output_dir: Path, step: StepResult
    ) -> None:
        """Copy the bilingual documents of the target language folder."""
        descriptor_entry = find_descriptor(archive)
        if descriptor_entry is None:
            raise DescriptorError(f"No project descriptor in {archive.path}")

        language = read_descriptor(archive, descriptor_entry).target_language
        if language is None:
            raise DescriptorError(f"No target language in {descriptor_entry}")
        logger.info(f"Target language: {language}")

        entries = archive.find(language, DOCUMENT_DEPTH, suffix_filter(DOCUMENT_SUFFIX))
        if not entries:
            logger.warning(f"No {DOCUMENT_SUFFIX} files in {language}/")

        for entry in entries:
            destination = output_dir / language / PurePosixPath(entry).name
            logger.info(f"Extract {entry} > {destination}")
            step.outputs.append(archive.extract_entry(entry, destination))

    @staticmethod
    def _convert_stores(
        archive: PackageArchive,
        suffix: str,
        step: StepResult,
        convert: Callable[[Path], Path],
    ) -> None:
        """Extract every store with a suffix and convert it.

        Every store is attempted; the step fails if any of them failed.
        """
        entries = archive.find("", STORE_DEPTH, suffix_filter(suffix))
        if not entries:
            logger.info(f"No {suffix} files in {archive.path}")
            return

        failures = []
        with tempfile.TemporaryDirectory(prefix="sdlppx_") as tmp_dir:
            for index, entry in enumerate(entries):
                # One folder per store: names may repeat across folders
                local = Path(tmp_dir) / str(index) / PurePosixPath(entry).name
                try:
                    archive.extract_entry(entry, local)
                    step.outputs.append(convert(local))
                except STEP_ERRORS as e:
                    logger.error(f"Cannot convert {entry}: {e}")
                    failures.append(f"{entry}: {e}")

        if failures:
            raise StoreError("; ".join(failures))

    def _convert_tm(self, output_dir: Path) -> Callable[[Path], Path]:
        converter = TMConverter(self.settings)
        return lambda store: converter.convert(store, output_dir)

    def _convert_termbase(self, output_dir: Path, prefix: str) -> Callable[[Path], Path]:
        converter = TermbaseConverter(self.settings)
        return lambda store: converter.convert(store, output_dir, prefix)
