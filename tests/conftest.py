"""
Shared test fixtures and configuration.
"""

import logging
import textwrap
from pathlib import Path

import pytest

from subgen.core.models.config import GeneratorConfig
from subgen.core.models.substitution import SubstitutionRequest

from tests.java_sources import ESPRESSO_SUBSTITUTIONS_JAVA, FOO_JAVA, SUBSTITUTION_JAVA


@pytest.fixture(autouse=True)
def _restore_logging():
    """CLI tests reconfigure the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    pkg_level = logging.getLogger("subgen").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("subgen").setLevel(pkg_level)


@pytest.fixture
def config() -> GeneratorConfig:
    """Default generator configuration."""
    return GeneratorConfig()


@pytest.fixture
def make_request():
    """Factory for SubstitutionRequest with Foo as the default owner."""

    def _make(**overrides) -> SubstitutionRequest:
        fields = dict(
            owner="com.example.natives.Foo",
            method_name="bar",
            parameter_types=(),
            has_receiver=False,
            is_void=True,
        )
        fields.update(overrides)
        return SubstitutionRequest(**fields)

    return _make


@pytest.fixture
def java_project(tmp_path: Path) -> Path:
    """A project with the marker annotations, Foo, and a substitutions.yml."""
    pkg_dir = tmp_path / "src" / "com" / "oracle" / "truffle" / "espresso" / "substitutions"
    pkg_dir.mkdir(parents=True)
    (pkg_dir / "Substitution.java").write_text(SUBSTITUTION_JAVA)
    (pkg_dir / "EspressoSubstitutions.java").write_text(ESPRESSO_SUBSTITUTIONS_JAVA)

    foo_dir = tmp_path / "src" / "com" / "example" / "natives"
    foo_dir.mkdir(parents=True)
    (foo_dir / "Foo.java").write_text(FOO_JAVA)

    (tmp_path / "substitutions.yml").write_text(textwrap.dedent("""\
        source_roots:
          - src
        output_dir: gen
    """))
    return tmp_path
