"""Shared fixtures for vulnreport tests."""

from datetime import datetime, timezone

import pytest

from vulnreport.models import CheckData, Report, Vulnerability

START_TIME = datetime(2021, 5, 18, 13, 30, 15, tzinfo=timezone.utc)
START_TIME_STR = "2021-05-18 13:30:15"
END_TIME = datetime(2021, 5, 18, 14, 0, 50, tzinfo=timezone.utc)
END_TIME_STR = "2021-05-18 14:00:50"


def make_check_data(**overrides) -> CheckData:
    fields = {
        "check_id": "ID0",
        "checktype_name": "CT0",
        "checktype_version": "CTV0",
        "target": "example.com",
        "status": "FINISHED",
        "start_time": START_TIME,
        "end_time": END_TIME,
    }
    fields.update(overrides)
    return CheckData(**fields)


def make_vulnerability(score: float = 0.0, summary: str = "mocked vulnerability", **overrides) -> Vulnerability:
    return Vulnerability(summary=summary, score=score, **overrides)


@pytest.fixture
def check_data() -> CheckData:
    return make_check_data()


@pytest.fixture
def report(check_data) -> Report:
    return Report.from_parts(check_data)


@pytest.fixture
def write_report(tmp_path):
    """Write encoded report bytes to a temporary file and return its path."""

    def _write(data: bytes, filename: str = "report.json") -> str:
        path = tmp_path / filename
        path.write_bytes(data)
        return str(path)

    return _write
