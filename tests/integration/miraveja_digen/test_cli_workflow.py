"""Integration tests for the generate workflow from a declaration file to running code."""

import logging

import pytest
import structlog
from typer.testing import CliRunner

from miraveja_digen.domain import DeclarationSet, SourceUnit
from miraveja_digen.infrastructure.cli import app
from miraveja_digen.infrastructure.runtime import ServiceCollection
from miraveja_digen.infrastructure.testing import dependency, exec_unit, installed_module, ref, service_type


@pytest.fixture(autouse=True)
def restore_logging():
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()


def read_unit(path):
    return SourceUnit(name=path.name, namespace="billing", text=path.read_text(encoding="utf-8"))


class TestGenerateWorkflow:
    """Test generating from a JSON declaration set and loading the written units."""

    def test_written_units_wire_the_application(self, tmp_path):
        declarations = DeclarationSet(
            types=(
                service_type("billing.Invoices", dependency("_ledger", ref("billing.Ledger")), lifetimes=["Scoped"]),
                service_type("billing.Ledger", lifetimes=["Singleton"]),
            )
        )
        source = tmp_path / "declarations.json"
        source.write_text(declarations.model_dump_json(indent=2), encoding="utf-8")
        output = tmp_path / "generated"

        result = CliRunner().invoke(app, ["generate", str(source), "--output", str(output)])
        assert result.exit_code == 0, result.output

        class Ledger:
            pass

        class Invoices:
            pass

        with installed_module("billing", Invoices=Invoices, Ledger=Ledger):
            exec_unit(read_unit(output / "billing.Invoices.initializer.py"))
            exec_unit(read_unit(output / "billing.Ledger.initializer.py"))
            registrations = exec_unit(read_unit(output / "billing.service_registrations.py"))
            provider = registrations["add_services"](ServiceCollection()).build_provider()

        with provider.create_scope() as first, provider.create_scope() as second:
            invoices = first.resolve(Invoices)

            assert invoices is first.resolve(Invoices)
            assert invoices is not second.resolve(Invoices)
            assert invoices._ledger is second.resolve(Invoices)._ledger

    def test_regeneration_is_byte_identical(self, tmp_path):
        declarations = DeclarationSet(types=(service_type("billing.Ledger"),))
        source = tmp_path / "declarations.json"
        source.write_text(declarations.model_dump_json(), encoding="utf-8")
        runner = CliRunner()

        runner.invoke(app, ["generate", str(source), "--output", str(tmp_path / "first")])
        runner.invoke(app, ["generate", str(source), "--output", str(tmp_path / "second")])

        first = {path.name: path.read_bytes() for path in (tmp_path / "first").iterdir()}
        second = {path.name: path.read_bytes() for path in (tmp_path / "second").iterdir()}
        assert first == second
        assert sorted(first) == ["billing.Ledger.initializer.py", "billing.service_registrations.py"]
