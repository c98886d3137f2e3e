"""
Shared fixtures.

Every test starts from a clean environment: cached settings and the
questionnaire singleton are reset, and ATG_/CONTACT_SYNC_ variables removed.
"""

import os

import pytest

from atg_intake.catalog.loader import QuestionnaireLoader, get_questionnaire
from atg_intake.config import reset_settings


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    for name in list(os.environ):
        if name.startswith("ATG_") or name.startswith("CONTACT_SYNC_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    QuestionnaireLoader.reset()
    yield
    reset_settings()
    QuestionnaireLoader.reset()


@pytest.fixture
def questionnaire():
    """The packaged questionnaire."""
    return get_questionnaire()


@pytest.fixture
def results_by_id(questionnaire):
    return {r.id: r for r in questionnaire.results}
