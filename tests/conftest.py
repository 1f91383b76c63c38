from datetime import datetime, timedelta

import pytest

from compliance_health_check.core.report_exporter import ReportExporter
from compliance_health_check.core.report_store import ReportStore
from compliance_health_check.core.share_links import ShareRegistry


class FakeClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, start=datetime(2024, 1, 1, 9, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


ALL_GOOD_ANSWERS = {
    1: "Yes",
    2: "Yes",
    3: "Yes",
    4: "Yes",
    5: "Yes",
    6: "Yes",
    7: "Yes",
    8: "Yes, filed patents",
    9: "Yes",
    10: "Yes",
    11: "Yes, all required licenses",
    12: "Yes",
    13: "No",
    14: "Yes",
    15: "Yes",
}

ALL_BAD_ANSWERS = {
    1: "No",
    2: "No",
    3: "No",
    4: "No",
    5: "No",
    6: "No",
    7: "No",
    8: "No, but have unique products/technology",
    9: "No",
    10: "No",
    11: "Some licenses missing",
    12: "No",
    13: "Yes",
    14: "No",
    15: "No",
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def report_store(tmp_path, clock):
    return ReportStore(str(tmp_path / "reports"), clock=clock)


@pytest.fixture
def share_registry(clock):
    return ShareRegistry("http://localhost:5173/", clock=clock)


@pytest.fixture
def report_exporter(tmp_path):
    return ReportExporter(str(tmp_path / "output"))


@pytest.fixture
def all_good_answers():
    return dict(ALL_GOOD_ANSWERS)


@pytest.fixture
def all_bad_answers():
    return dict(ALL_BAD_ANSWERS)
