"""Unit tests for the command line interface."""

import logging

import pytest
import structlog
from typer.testing import CliRunner

from miraveja_digen.domain import DeclarationSet
from miraveja_digen.infrastructure.cli import EXIT_ERRORS, EXIT_INVALID_INPUT, app
from miraveja_digen.infrastructure.testing import dependency, plain_type, ref, service_type

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()


def write(path, declarations):
    path.write_text(declarations.model_dump_json(), encoding="utf-8")
    return path


@pytest.fixture
def declarations_file(tmp_path):
    return write(
        tmp_path / "declarations.json",
        DeclarationSet(
            types=(
                service_type("app.A", dependency("_b", ref("app.B"))),
                service_type("app.B", lifetimes=["Singleton"]),
            )
        ),
    )


class TestGenerateCommand:
    """Test cases for the generate command."""

    def test_writes_units(self, tmp_path, declarations_file):
        output = tmp_path / "generated"

        result = runner.invoke(app, ["generate", str(declarations_file), "--output", str(output)])

        assert result.exit_code == 0
        assert sorted(path.name for path in output.iterdir()) == [
            "app.A.initializer.py",
            "app.B.initializer.py",
            "app.service_registrations.py",
        ]
        assert "0 error(s), 0 warning(s)" in result.output

    def test_assembly_option(self, tmp_path, declarations_file):
        output = tmp_path / "generated"

        result = runner.invoke(app, ["generate", str(declarations_file), "-o", str(output), "-a", "app.wiring"])

        assert result.exit_code == 0
        assert (output / "app.wiring.service_registrations.py").exists()

    def test_error_diagnostics_fail_the_command(self, tmp_path):
        path = write(
            tmp_path / "declarations.json",
            DeclarationSet(types=(service_type("app.A", lifetimes=["Transient", "Scoped"]),)),
        )

        result = runner.invoke(app, ["generate", str(path), "--output", str(tmp_path / "generated")])

        assert result.exit_code == EXIT_ERRORS
        assert "DIGEN001" in result.output
        assert "1 error(s), 0 warning(s)" in result.output


class TestCheckCommand:
    """Test cases for the check command."""

    def test_warnings_do_not_fail(self, tmp_path):
        path = write(
            tmp_path / "declarations.json",
            DeclarationSet(types=(service_type("app.A", dependency("_missing", ref("app.Missing"))),)),
        )

        result = runner.invoke(app, ["check", str(path)])

        assert result.exit_code == 0
        assert "DIGEN002" in result.output
        assert not (tmp_path / "generated").exists()

    def test_unreadable_file(self, tmp_path):
        result = runner.invoke(app, ["check", str(tmp_path / "missing.json")])

        assert result.exit_code == EXIT_INVALID_INPUT

    def test_malformed_declarations(self, tmp_path):
        path = tmp_path / "declarations.json"
        path.write_text('{"types": [{"ref": 42}]}', encoding="utf-8")

        result = runner.invoke(app, ["check", str(path)])

        assert result.exit_code == EXIT_INVALID_INPUT

    def test_circular_inheritance(self, tmp_path):
        path = write(
            tmp_path / "declarations.json",
            DeclarationSet(
                types=(
                    plain_type("app.First", base=ref("app.Second")),
                    plain_type("app.Second", base=ref("app.First")),
                )
            ),
        )

        result = runner.invoke(app, ["check", str(path)])

        assert result.exit_code == EXIT_INVALID_INPUT
