# tests/test_cli.py
"""
Tests for the ledger.py admin commands against a temporary SQLite file.

Run:
    pytest tests/test_cli.py -v
"""
import pytest

import core.db
import ledger

WALLET = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"


@pytest.fixture
def cli_db(tmp_path, monkeypatch):
    """Point the lazily created engine at a fresh database file."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'ledger.db'}")
    monkeypatch.setattr(core.db, "_engine", None)
    monkeypatch.setattr(core.db, "_SessionFactory", None)
    yield
    if core.db._engine is not None:
        core.db._engine.dispose()


class TestCommands:
    """End-to-end admin flow through main()."""

    def test_full_flow(self, cli_db, capsys):
        assert ledger.main(["init-db"]) == 0
        assert ledger.main(["register", "--name", "Alice", "--email", "alice@example.com"]) == 0
        assert ledger.main(["wallet", "--user-id", "1", "--address", WALLET]) == 0
        assert ledger.main([
            "register", "--name", "Bob", "--email", "bob@example.com", "--ref", WALLET
        ]) == 0
        assert ledger.main(["submit", "--user-id", "2", "--amount", "10000", "--ref", "TX-1"]) == 0
        capsys.readouterr()

        assert ledger.main(["approve", "--investment-id", "1"]) == 0
        out = capsys.readouterr().out
        assert "Investment approved successfully" in out
        assert "L1" in out and "user 1" in out

        assert ledger.main(["approve", "--investment-id", "1"]) == 0
        assert "already active" in capsys.readouterr().out

        assert ledger.main(["upline", "--user-id", "2"]) == 0
        assert "alice@example.com" in capsys.readouterr().out

        assert ledger.main(["levels", "--user-id", "1"]) == 0
        assert "Total income: 500.00 from 1 members" in capsys.readouterr().out

        assert ledger.main(["reconcile"]) == 0
        assert "fixed 0" in capsys.readouterr().out

    def test_ledger_error_exit_code(self, cli_db, capsys):
        assert ledger.main(["reject", "--investment-id", "99"]) == 1
        assert "NotFoundError" in capsys.readouterr().err

    def test_validation_error_exit_code(self, cli_db, capsys):
        ledger.main(["register", "--name", "Carol", "--email", "carol@example.com"])

        assert ledger.main(["submit", "--user-id", "1", "--amount", "10"]) == 1
        assert "ValidationError" in capsys.readouterr().err

    def test_bad_config_exit_code(self, cli_db, monkeypatch, capsys):
        monkeypatch.setenv("MIN_INVESTMENT", "lots")

        assert ledger.main(["stats"]) == 2
        assert "Configuration loading failed" in capsys.readouterr().err

    def test_packages_and_revenue(self, cli_db, capsys):
        """TEST: a package created from the CLI can be listed and invested in."""
        assert ledger.main([
            "package-add", "--name", "Gold", "--min", "1000", "--max", "50000",
            "--daily-return", "0.5", "--duration", "180"
        ]) == 0
        assert "Package 1 'Gold' created" in capsys.readouterr().out

        assert ledger.main(["packages"]) == 0
        assert "Gold" in capsys.readouterr().out

        ledger.main(["register", "--name", "Dora", "--email", "dora@example.com"])
        assert ledger.main(["submit", "--user-id", "1", "--amount", "2000", "--package-id", "1"]) == 0
        assert "Investment 1 pending: 2000" in capsys.readouterr().out

        assert ledger.main(["revenue", "--days", "7"]) == 0
        assert "Deposits" in capsys.readouterr().out

    def test_package_bounds_validated(self, cli_db, capsys):
        assert ledger.main([
            "package-add", "--name", "Upside", "--min", "5000", "--max", "1000",
            "--daily-return", "0.5"
        ]) == 1
        assert "ValidationError" in capsys.readouterr().err
