"""
Root conftest.py - Shared fixtures for all test types.

This file is automatically loaded by pytest and provides:
- Database session fixtures
- Temporary repository storage and path resolver
- Gateway, hook installer and provisioner fixtures
"""
import shutil
import sys
import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add backend to path for imports
backend_path = Path(__file__).parent.parent / "backend"
sys.path.insert(0, str(backend_path))

import repoforge.models  # noqa: F401  (registers tables)
from repoforge.config import BUNDLED_HOOKS_DIR
from repoforge.database import Base
from repoforge.services.gateway import LocalGitGateway
from repoforge.services.hooks import HookInstaller, load_hook_specs
from repoforge.services.provisioner import RepositoryProvisioner
from repoforge.services.repo_paths import RepoPathResolver

from tdd.shared.factories import UserFactory
from tdd.shared.mocks import MockGateway


# -----------------------------------------------------------------------------
# Database Fixtures
# -----------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def async_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests.

    Each test gets a fresh in-memory database.
    """
    async_session_factory = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def owner(db_session):
    """A persisted user able to own projects."""
    user = UserFactory.build()
    db_session.add(user)
    await db_session.commit()
    return user


# -----------------------------------------------------------------------------
# Marker-based fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _mark_test(request):
    """Automatically apply markers based on test location."""
    if "unit" in str(request.fspath):
        request.applymarker(pytest.mark.unit)
    elif "integration" in str(request.fspath):
        request.applymarker(pytest.mark.integration)


# -----------------------------------------------------------------------------
# Repository Storage Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def repos_dir():
    """Create a temporary base path for bare repos.

    Uses resolve() so paths compare equal regardless of symlinked tmp dirs.
    """
    temp_dir = Path(tempfile.mkdtemp()).resolve()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def resolver(repos_dir):
    """Path resolver rooted at the temporary base path."""
    return RepoPathResolver(
        base_path=repos_dir,
        host_url="http://forge.test",
        ssh_user="git",
        ssh_host="forge.test",
    )


@pytest.fixture
def hook_installer():
    """Hook installer using the bundled templates."""
    return HookInstaller(BUNDLED_HOOKS_DIR)


@pytest.fixture
def hook_specs():
    """The bundled post-receive hook."""
    return load_hook_specs(BUNDLED_HOOKS_DIR)


# -----------------------------------------------------------------------------
# Gateway and Provisioner Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def mock_gateway(resolver):
    """Scriptable gateway that creates bare repos on materialize."""
    return MockGateway(resolver=resolver)


@pytest.fixture
def local_gateway(resolver):
    """Real local git host gateway on the temporary base path."""
    return LocalGitGateway(resolver, timeout=5.0)


@pytest.fixture
def provisioner(mock_gateway, hook_installer, resolver, hook_specs):
    """Provisioner wired to the mock gateway."""
    return RepositoryProvisioner(
        gateway=mock_gateway,
        hook_installer=hook_installer,
        resolver=resolver,
        hook_specs=hook_specs,
    )


# -----------------------------------------------------------------------------
# Utility Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def anyio_backend():
    """Required for pytest-asyncio compatibility."""
    return "asyncio"
