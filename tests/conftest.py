import pytest

from focusflow.config import Settings
from focusflow.context import AppContext


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        ENVIRONMENT="testing",
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        RETRY_INITIAL_DELAY=0,
        HEALTH_RETRY_DELAY=0,
        CALENDAR_PRELOAD_DELAY=0,
        DOWNLOAD_DIR=tmp_path / "downloads",
        LOCAL_STORAGE_PATH=tmp_path / "local_storage.json",
        CHAT_RESPONSE_DELAY_MIN=0,
        CHAT_RESPONSE_DELAY_MAX=0,
    )


@pytest.fixture
async def context(settings):
    context = await AppContext.create(settings)
    yield context
    await context.close()


@pytest.fixture
async def user(context):
    return await context.auth_store.sign_up("tester@example.com", "secret123")
