import os

import pytest
from pydantic_ai import models

# Tests never talk to real model providers
models.ALLOW_MODEL_REQUESTS = False

os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached per process; tests that touch the environment need a clean cache."""
    from transcripts_machine.config import get_automation_settings
    from transcripts_machine_api.core.config import get_settings

    get_automation_settings.cache_clear()
    get_settings.cache_clear()
    yield
