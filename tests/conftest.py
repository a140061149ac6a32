import pytest

from builders import write_workbook
from surveyport.config import SurveyportConfig
from surveyport.importer import ImportService
from surveyport.store import JsonStore


@pytest.fixture
def store(tmp_path):
    s = JsonStore(tmp_path / "data" / "store.json")
    yield s
    s.close()


@pytest.fixture
def service(store):
    return ImportService(store, SurveyportConfig())


@pytest.fixture
def make_workbook(tmp_path):
    """Build an upload workbook from survey and question rows; returns its path."""
    counter = {"n": 0}

    def _make(surveys, questions, name=None):
        counter["n"] += 1
        path = tmp_path / (name or f"upload_{counter['n']}.xlsx")
        sheets = {}
        if surveys is not None:
            sheets["Survey Master"] = surveys
        if questions is not None:
            sheets["Question Master"] = questions
        return write_workbook(path, sheets)

    return _make
