"""Global test configuration: settings, fake PACS, application and HTTP clients."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from medimaging.api.app import create_app
from medimaging.api.security import TokenManager
from medimaging.repositories import StudyRepository, UserRepository
from medimaging.services.pacs import PacsClient
from medimaging.settings import Settings
from medimaging.utils.bootstrap import build_study_repository, build_user_repository
from tests.utils import DIRECT_URL, PROXY_URL, FakePacs

TEST_SECRET = "test-secret-key-for-testing-only"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at the fake PACS and a temporary upload directory."""
    return Settings(
        environment="test",
        jwt_secret_key=TEST_SECRET,
        bcrypt_rounds=4,
        pacs_url=PROXY_URL,
        pacs_direct_url=DIRECT_URL,
        upload_dir=str(tmp_path / "uploads"),
        frontend_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def fake_pacs() -> FakePacs:
    return FakePacs.with_demo_data()


@pytest_asyncio.fixture
async def pacs_client(fake_pacs: FakePacs) -> AsyncGenerator[PacsClient]:
    """PACS client wired to the fake PACS."""
    async with PacsClient(
        PROXY_URL, DIRECT_URL, "orthanc", "orthanc", transport=fake_pacs.transport()
    ) as client:
        yield client


@pytest.fixture
def token_manager() -> TokenManager:
    return TokenManager(TEST_SECRET)


@pytest.fixture
def user_repo() -> UserRepository:
    return build_user_repository(rounds=4)


@pytest.fixture
def study_repo() -> StudyRepository:
    return build_study_repository()


@pytest_asyncio.fixture
async def app(test_settings: Settings, fake_pacs: FakePacs) -> AsyncGenerator[FastAPI]:
    """Application instance talking to the fake PACS."""
    application = create_app(test_settings, pacs_transport=fake_pacs.transport())
    yield application
    await application.state.pacs.close()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create test API client."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def auth_token(client: AsyncClient) -> str:
    """Bearer token of the built-in doctor account."""
    response = await client.post(
        "/api/auth/login", json={"username": "doctor", "password": "doctor123"}
    )
    assert response.status_code == 200
    token: str = response.json()["token"]
    return token


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth_token}"}
