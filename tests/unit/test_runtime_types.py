"""Unit tests for runtime data types and specs."""

from pathlib import Path

import pytest
import semver

from cellar.runtime import RUNTIME_SPECS, RuntimeRequirement, SelectionOptions
from cellar.runtime.specs import get_runtime_spec
from cellar.runtime.types import parse_version


class TestRuntimeSpecs:
    """Test runtime specifications."""

    def test_get_runtime_spec_valid_language(self):
        spec = get_runtime_spec("python")
        assert spec.display_name == "Python"
        assert spec.env.module_search_path == "PYTHONPATH"
        assert spec.env.binary == "PYTHON"

    def test_get_runtime_spec_invalid_language(self):
        """Should raise ValueError for invalid language."""
        with pytest.raises(ValueError, match="not supported"):
            get_runtime_spec("cobol")

    def test_site_packages_templates(self):
        layout = RUNTIME_SPECS["python"].site_packages
        assert layout.public.format(xy="3.6") == "lib/python3.6/site-packages"
        assert layout.private.format(xy="3.6") == "libexec/lib/python3.6/site-packages"


class TestVersions:
    """Test version parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [("2.7", (2, 7, 0)), ("3.11.4", (3, 11, 4)), ("3", (3, 0, 0)), (None, (0, 0, 0))],
    )
    def test_parse_version(self, value, expected):
        version = parse_version(value)
        assert (version.major, version.minor, version.patch) == expected

    def test_versions_compare(self):
        assert parse_version("2.7.18") < parse_version("3.6")
        assert parse_version("3.10") > parse_version("3.9.18")


class TestRuntimeRequirement:
    """Test RuntimeRequirement dataclass."""

    def test_coerces_fields(self):
        req = RuntimeRequirement(binary="/usr/local/bin/python3", version="3.11.4", name="python3")

        assert req.binary == Path("/usr/local/bin/python3")
        assert isinstance(req.version, semver.Version)
        assert req.xy == "3.11"
        assert req.satisfied is True

    def test_is_immutable(self):
        req = RuntimeRequirement(binary="/usr/bin/python", version="2.7", name="python")
        with pytest.raises(AttributeError):
            req.satisfied = False

    def test_repr(self):
        req = RuntimeRequirement(
            binary="/usr/bin/python", version="2.7", name="python", satisfied=False
        )
        repr_str = repr(req)
        assert "python" in repr_str
        assert "2.7.0" in repr_str
        assert "unsatisfied" in repr_str


class TestSelectionOptions:
    def test_defaults_allow_2_and_3(self):
        assert SelectionOptions().allowed_major_versions == frozenset({2, 3})

    def test_only(self):
        options = SelectionOptions.only(3)
        assert options.allows(parse_version("3.6"))
        assert not options.allows(parse_version("2.7"))

    def test_from_iterable_none_is_default(self):
        assert SelectionOptions.from_iterable(None) == SelectionOptions()
