"""
Tests for the floor-ops CLI.
"""

import pytest
from sqlalchemy.orm import sessionmaker
from typer.testing import CliRunner

import cli
from rest_api.models import Bill, MenuItem, Table
from shared.config.constants import BillStatus
from shared.infrastructure import db as db_module
from tests.conftest import count_rows


runner = CliRunner()


@pytest.fixture
def cli_db(engine, monkeypatch):
    """Point the CLI's engine and session factory at the test database."""
    monkeypatch.setattr(db_module, "engine", engine)
    monkeypatch.setattr(db_module, "SessionLocal", sessionmaker(bind=engine, autoflush=False))
    return engine


class TestCli:

    def test_init_db_and_seed(self, cli_db, db_session):
        assert runner.invoke(cli.app, ["init-db"]).exit_code == 0

        result = runner.invoke(cli.app, ["seed"])

        assert result.exit_code == 0
        assert count_rows(db_session, Table) == 8
        assert count_rows(db_session, MenuItem) == 10

    def test_seed_is_idempotent(self, cli_db, db_session):
        runner.invoke(cli.app, ["seed"])
        runner.invoke(cli.app, ["seed"])

        assert count_rows(db_session, Table) == 8

    def test_tables_overview(self, cli_db, seed_table):
        result = runner.invoke(cli.app, ["tables"])

        assert result.exit_code == 0
        assert "T1" in result.output

    def test_verify_bills_consistent(self, cli_db, place_order):
        place_order()

        result = runner.invoke(cli.app, ["verify-bills"])

        assert result.exit_code == 0
        assert "consistent" in result.output

    def test_verify_bills_detects_and_fixes_drift(self, cli_db, db_session, place_order):
        order = place_order()
        db_session.get(Bill, order.bill_id).total_cents = 1
        db_session.commit()

        detected = runner.invoke(cli.app, ["verify-bills"])
        fixed = runner.invoke(cli.app, ["verify-bills", "--fix"])

        assert detected.exit_code == 1
        assert fixed.exit_code == 0
        db_session.expire_all()
        bill = db_session.get(Bill, order.bill_id)
        assert (bill.status, bill.total_cents) == (BillStatus.OPEN, 10000)
