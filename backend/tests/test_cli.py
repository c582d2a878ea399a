from contextlib import contextmanager

import pytest
from sqlalchemy.orm import sessionmaker

from payroll_api import cli
from payroll_api.db.session import Base


@pytest.fixture
def cli_database(engine, monkeypatch):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @contextmanager
    def scope():
        db = TestingSessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    monkeypatch.setattr(cli, "session_scope", scope)
    monkeypatch.setattr(cli, "init_db", lambda: Base.metadata.create_all(bind=engine))
    return engine


def test_seed_then_generate_reports_existing_periods(capsys, cli_database):
    assert cli.main(["seed"]) == 0
    seeded = capsys.readouterr().out.strip()
    assert seeded.startswith("Seeded company ")
    company_id = seeded.split()[2]

    # 1/2000 has no history, so every employee gets a payroll
    assert cli.main(["generate", company_id, "1", "2000"]) == 0
    first_run = capsys.readouterr().out.splitlines()
    assert first_run[0] == "Processed 6: 6 created, 0 failed"

    assert cli.main(["generate", company_id, "1", "2000"]) == 0
    second_run = capsys.readouterr().out.splitlines()
    assert second_run[0] == "Processed 6: 0 created, 6 failed"
    assert all("Payroll already exists for 1/2000" in line for line in second_run[1:])


def test_list_prints_filtered_payrolls(capsys, cli_database):
    cli.main(["seed"])
    capsys.readouterr()

    assert cli.main(["list", "--status", "PAID"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()

    assert len(lines) == 6 * 3
    assert all("status=PAID" in line for line in lines)
    assert all("gross=$" in line for line in lines)


def test_generate_error_exits_non_zero(capsys, cli_database):
    cli.main(["init-db"])
    capsys.readouterr()

    assert cli.main(["generate", "ghost", "13", "2024"]) == 1
    assert "Invalid month" in capsys.readouterr().err


def test_format_amount_uses_chilean_separators():
    assert cli.format_amount(1_296_300) == "$1.296.300"
