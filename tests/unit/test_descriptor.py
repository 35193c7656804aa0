"""Unit tests for project descriptor parsing."""

import logging
import sys
from pathlib import Path

import pytest

# Add tests directory to path to import conftest
tests_dir = Path(__file__).parent.parent
sys.path.insert(0, str(tests_dir))

from conftest import make_descriptor  # noqa: E402

from sdlppx.core.descriptor import PackageDescriptor  # noqa: E402
from sdlppx.core.errors import DescriptorError  # noqa: E402
from sdlppx.core.models import PackageType  # noqa: E402

NAMESPACED_DESCRIPTOR = b"""<?xml version="1.0" encoding="utf-8"?>
<p:PackageProject xmlns:p="http://www.sdl.com/ProjectPackage" PackageType="ProjectPackage">
  <p:LanguageDirections>
    <p:LanguageDirection SourceLanguageCode="en-US" TargetLanguageCode="de-DE" />
  </p:LanguageDirections>
</p:PackageProject>
"""


@pytest.mark.unit
class TestPackageDescriptor:
    """Test descriptor reading and updating."""

    def test_parse_project_package(self) -> None:
        descriptor = PackageDescriptor.parse(make_descriptor())

        assert descriptor.package_type is PackageType.PROJECT_PACKAGE
        assert descriptor.target_language == "fr-FR"

    def test_switch_to_return_package(self) -> None:
        descriptor = PackageDescriptor.parse(make_descriptor())
        descriptor.package_type = PackageType.RETURN_PACKAGE

        data = descriptor.to_bytes()
        reparsed = PackageDescriptor.parse(data)

        assert b'PackageType="ReturnPackage"' in data
        assert reparsed.package_type is PackageType.RETURN_PACKAGE
        assert reparsed.target_language == "fr-FR"
        assert reparsed.root.get("Name") == "demo"

    def test_namespaced_descriptor(self) -> None:
        descriptor = PackageDescriptor.parse(NAMESPACED_DESCRIPTOR)
        descriptor.package_type = PackageType.RETURN_PACKAGE

        data = descriptor.to_bytes()
        reparsed = PackageDescriptor.parse(data)

        assert b"xmlns:p=" in data
        assert reparsed.package_type is PackageType.RETURN_PACKAGE
        assert reparsed.target_language == "de-DE"

    def test_several_directions_use_first(self, caplog: pytest.LogCaptureFixture) -> None:
        descriptor = PackageDescriptor.parse(make_descriptor(targets=("it-IT", "es-ES")))

        with caplog.at_level(logging.WARNING):
            assert descriptor.target_language == "it-IT"
        assert "only the first one is used" in caplog.text

    def test_no_direction(self) -> None:
        descriptor = PackageDescriptor.parse(make_descriptor(targets=()))
        assert descriptor.target_language is None

    def test_malformed_xml(self) -> None:
        with pytest.raises(DescriptorError):
            PackageDescriptor.parse(b"<PackageProject PackageType=")

    def test_missing_package_type(self) -> None:
        descriptor = PackageDescriptor.parse(b"<PackageProject />")
        with pytest.raises(DescriptorError, match="no PackageType"):
            _ = descriptor.package_type

    def test_unknown_package_type(self) -> None:
        descriptor = PackageDescriptor.parse(b'<PackageProject PackageType="Other" />')
        with pytest.raises(DescriptorError, match="Unknown package type"):
            _ = descriptor.package_type
