import sys
from pathlib import Path
from urllib.parse import quote

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from image_server.api.deps import get_current_time
from image_server.core.config import Settings, get_settings
from image_server.core.security import compute_signature
from image_server.main import create_app

TEST_SECRET = "test-secret"
NOW = 1_700_000_000


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def upload_dir(tmp_path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def settings(upload_dir) -> Settings:
    return Settings(
        _env_file=None,
        SECRET_KEY=TEST_SECRET,
        UPLOAD_DIR_PATH=upload_dir,
    )


@pytest.fixture
def app_instance(settings):
    app = create_app(settings)
    app.dependency_overrides[get_current_time] = lambda: NOW
    return app


@pytest_asyncio.fixture
async def client(app_instance):
    transport = ASGITransport(app=app_instance)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def signed():
    """Build a signed path for ``method`` on ``filename``; empty filename targets creation."""

    def _signed(
        method: str,
        filename: str = "",
        expires: int = NOW + 60,
        secret: str = TEST_SECRET,
    ) -> str:
        signature = compute_signature(secret, method, filename, expires)
        path = f"/images/{quote(filename, safe='')}" if filename else "/images"
        return f"{path}?expires={expires}&signature={signature}"

    return _signed
