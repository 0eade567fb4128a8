"""
Pytest Configuration and Fixtures

Shared fixtures: an isolated DATA_DIR per test, repositories and services
wired to it, and TestClients for the API (anonymous and logged in).
"""

import os

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Test environment defaults: MUST be before any notevault imports.
#
# 1. Load .env first so local overrides are honoured.
# 2. setdefault fills in anything still missing so that the module-level
#    Settings() and app built at import time never touch a real data dir.
# ---------------------------------------------------------------------------
load_dotenv()  # .env → os.environ (no-op if file is missing)

_test_env = {
    "DATA_DIR": os.path.join(os.path.dirname(__file__), ".data"),
    "SESSION_SECRET": "test-session-secret",
    "LOG_LEVEL": "WARNING",
}
for _key, _value in _test_env.items():
    os.environ.setdefault(_key, _value)

# ---------------------------------------------------------------------------
# Imports (safe now that env vars are set)
# ---------------------------------------------------------------------------
import time  # noqa: E402
from collections.abc import Generator  # noqa: E402
from pathlib import Path  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from notevault.core.config import Settings  # noqa: E402
from notevault.main import create_app  # noqa: E402
from notevault.repositories.index import IndexStore  # noqa: E402
from notevault.repositories.notes import NoteRepository  # noqa: E402
from notevault.repositories.uploads import UploadRepository  # noqa: E402
from notevault.services.sharing import ShareService  # noqa: E402

TEST_USER = "admin"
TEST_PASSWORD = "correct-horse"

BASE_URL = os.environ.get("NOTEVAULT_URL", "http://localhost:8000")


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config(tmp_path: Path) -> Settings:
    """Settings pointing at a fresh temp DATA_DIR."""
    cfg = Settings(
        DATA_DIR=tmp_path / "data",
        AUTH_USERS=f"{TEST_USER}:{TEST_PASSWORD}",
        SESSION_SECRET="test-session-secret",
        MAX_UPLOAD_SIZE=1024,
    )
    for directory in (cfg.DATA_DIR, cfg.NOTES_DIR, cfg.UPLOADS_DIR):
        directory.mkdir(parents=True, exist_ok=True)
    return cfg


@pytest.fixture
def index_store(config: Settings) -> IndexStore:
    return IndexStore(config.INDEX_FILE)


@pytest.fixture
def note_repo(config: Settings, index_store: IndexStore) -> NoteRepository:
    return NoteRepository(config, index_store)


@pytest.fixture
def upload_repo(config: Settings, index_store: IndexStore) -> UploadRepository:
    return UploadRepository(config, index_store)


@pytest.fixture
def share_service(index_store: IndexStore, note_repo: NoteRepository) -> ShareService:
    return ShareService(index_store, note_repo, share_page="/share.html")


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client(config: Settings) -> Generator[TestClient, None, None]:
    """
    Anonymous TestClient.

    Entering the context runs the lifespan handler, which builds the
    repositories on app.state.
    """
    with TestClient(create_app(config)) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client: TestClient) -> TestClient:
    """TestClient holding an authenticated session cookie."""
    response = client.post(
        "/api/v1/auth/", json={"username": TEST_USER, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200, response.text
    return client


# ---------------------------------------------------------------------------
# Live server fixtures (tests marked ``live``)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def wait_for_api():
    """
    Block until the API is ready or timeout expires.

    Polls /health endpoint with 1s intervals for up to 30s.
    """
    url = f"{BASE_URL}/health"
    timeout = 30
    start = time.time()

    print("\n[Test] Waiting for API...")
    while time.time() - start < timeout:
        try:
            res = httpx.get(url, timeout=1.0)
            if res.status_code == 200:
                print("API Ready")
                return
        except httpx.RequestError:
            time.sleep(1)

    pytest.fail(f"API unreachable at {BASE_URL}. Is uvicorn running?")


@pytest.fixture(scope="session")
def api_client(wait_for_api) -> Generator[httpx.Client, None, None]:
    """
    HTTP client for live tests, logged in with LIVE_USER / LIVE_PASSWORD.

    Base URL points to /api/v1 for cleaner test assertions.
    """
    with httpx.Client(base_url=f"{BASE_URL}/api/v1", timeout=10.0) as http:
        res = http.post(
            "/auth/",
            json={
                "username": os.environ.get("LIVE_USER", "admin"),
                "password": os.environ.get("LIVE_PASSWORD", "changeme123"),
            },
        )
        assert res.status_code == 200, res.text
        yield http
