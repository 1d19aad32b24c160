import pytest
from dotenv import load_dotenv

from service.settings import Settings

load_dotenv()


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_settings():
    """Build Settings isolated from any .env file or exported AI_* variables."""
    def _make(**overrides):
        values = {
            "AI_PROVIDER": None,
            "GEMINI_API_KEY": None,
            "ANTHROPIC_API_KEY": None,
            "AI_MODEL_GEMINI": None,
            "AI_MODEL_CLAUDE": None,
            "AI_TEMPERATURE": None,
            "AI_MAX_TOKENS": None,
            "SCORING_DELAY_SECONDS": 0,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make
