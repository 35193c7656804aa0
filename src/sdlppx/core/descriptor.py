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

"""Project descriptor (.sdlproj) parsing and serialization.

Descriptor layout:
    ```xml
    <PackageProject PackageType="ProjectPackage" ...>
      <LanguageDirections>
        <LanguageDirection SourceLanguageCode="en-US" TargetLanguageCode="fr-FR" />
      </LanguageDirections>
    </PackageProject>
    ```
"""

from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as StdET  # noqa: N813
from collections.abc import Iterator
from typing import Any

import defusedxml.ElementTree as ET  # noqa: N817
from defusedxml import DefusedXmlException

from sdlppx.core.errors import DescriptorError
from sdlppx.core.models import PackageType

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIX = ".sdlproj"
ATTRIBUTE_PACKAGE_TYPE = "PackageType"
ATTRIBUTE_TARGET_LANGUAGE = "TargetLanguageCode"


def _local_name(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _iter_named(parent: Any, name: str) -> Iterator[Any]:
    """Iterate descendants (or self) with a local tag name, in document order."""
    for element in parent.iter():
        if _local_name(element.tag) == name:
            yield element


class PackageDescriptor:
    """Parsed project descriptor.

    Example:
        >>> descriptor = PackageDescriptor.parse(archive.read("project.sdlproj"))
        >>> descriptor.package_type
        <PackageType.PROJECT_PACKAGE: 'ProjectPackage'>
        >>> descriptor.package_type = PackageType.RETURN_PACKAGE
        >>> data = descriptor.to_bytes()
    """

    def __init__(self, root: Any, namespaces: list[tuple[str, str]] | None = None):
        self.root = root
        self.namespaces = namespaces or []

    @classmethod
    def parse(cls, data: bytes) -> PackageDescriptor:
        """Parse descriptor content.

        Raises:
            DescriptorError: If the content is not well-formed XML
        """
        try:
            namespaces = [
                ns for _, ns in ET.iterparse(io.BytesIO(data), events=("start-ns",))
            ]
            root = ET.fromstring(data)
        except (ET.ParseError, DefusedXmlException) as e:
            raise DescriptorError(f"Invalid project descriptor: {e}") from e

        return cls(root, namespaces)

    @property
    def package_type(self) -> PackageType:
        """Package type declared on the root element.

        Raises:
            DescriptorError: If the attribute is missing or unknown
        """
        value = self.root.get(ATTRIBUTE_PACKAGE_TYPE)
        if value is None:
            raise DescriptorError(f"Descriptor has no {ATTRIBUTE_PACKAGE_TYPE} attribute")
        try:
            return PackageType(value)
        except ValueError as e:
            raise DescriptorError(f"Unknown package type: {value}") from e

    @package_type.setter
    def package_type(self, value: PackageType) -> None:
        self.root.set(ATTRIBUTE_PACKAGE_TYPE, value.value)

    def language_directions(self) -> list[Any]:
        """LanguageDirection elements under PackageProject/LanguageDirections."""
        directions = []
        for project in _iter_named(self.root, "PackageProject"):
            for group in _iter_named(project, "LanguageDirections"):
                directions.extend(_iter_named(group, "LanguageDirection"))
                break
            break
        return directions

    @property
    def target_language(self) -> str | None:
        """Target language code of the first language direction.

        Packages with several target languages are not supported, only the
        first direction is honored.
        """
        directions = self.language_directions()
        if not directions:
            return None
        if len(directions) > 1:
            logger.warning(
                f"Descriptor has {len(directions)} language directions, "
                f"only the first one is used"
            )
        return directions[0].get(ATTRIBUTE_TARGET_LANGUAGE) or None

    def to_bytes(self) -> bytes:
        """Serialize the descriptor, keeping its namespace prefixes."""
        for prefix, uri in self.namespaces:
            try:
                StdET.register_namespace(prefix, uri)
            except ValueError:
                logger.debug(f"Cannot register namespace prefix {prefix!r}")

        return StdET.tostring(self.root, encoding="utf-8", xml_declaration=True)
