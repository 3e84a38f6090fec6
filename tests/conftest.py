# tests/conftest.py

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.actor import Actor
from app.core.locks import KeyedLock
from app.db.base import get_db, init_models
from app.domain.enums import Role
from app.main import app as fastapi_app
from app.schemas.account import AccountCreate, PayoutProfileIn
from app.services.accounts import AccountService
from app.services.review import ReviewService
from app.services.snapshots import SnapshotStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


# ---------------------------
# Database
# ---------------------------

@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'console.db'}")
    await init_models(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def locks() -> KeyedLock:
    return KeyedLock()


@pytest.fixture
def snapshots() -> SnapshotStore:
    return SnapshotStore(ttl_seconds=300, max_entries=32)


# ---------------------------
# Actors
# ---------------------------

async def _register(session, email: str, role: Role = Role.SUPPLIER, by: Actor | None = None) -> Actor:
    account = await AccountService(session).register(
        AccountCreate(display_name=email.split("@")[0].title(), email=email, role=role), by
    )
    return Actor(account.id, Role(account.role))


@pytest.fixture
async def admin(session) -> Actor:
    return await _register(session, "root@example.com", Role.ADMIN)


@pytest.fixture
async def other_admin(session, admin) -> Actor:
    return await _register(session, "ops@example.com", Role.ADMIN, by=admin)


@pytest.fixture
async def supplier(session) -> Actor:
    return await _register(session, "ram@example.com")


@pytest.fixture
async def other_supplier(session) -> Actor:
    return await _register(session, "sita@example.com")


@pytest.fixture
def verify_supplier(session):
    """Drive one submission through review and optionally credit earnings."""

    async def _verify(admin: Actor, supplier: Actor, credit: str | None = None) -> None:
        accounts = AccountService(session)
        review = ReviewService(session)
        await accounts.update_payout_profile(
            supplier, supplier.id, PayoutProfileIn(method="esewa", wallet_id="9800000000")
        )
        submission = await review.submit(
            supplier, None, [{"kind": "gmail", "reference": f"{supplier.id}@gmail.com"}]
        )
        await review.claim(admin, submission.id)
        await review.verify(admin, submission.id)
        if credit:
            await accounts.credit_earnings(admin, supplier.id, Decimal(credit))

    return _verify


@pytest.fixture
async def funded_supplier(verify_supplier, admin, supplier) -> Actor:
    """A verified supplier with 1000.00 earned and an eSewa payout profile."""
    await verify_supplier(admin, supplier, credit="1000.00")
    return supplier


# ---------------------------
# HTTP client
# ---------------------------

@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as s:
            yield s

    fastapi_app.dependency_overrides[get_db] = _get_db
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def headers():
    def _headers(actor: Actor) -> dict[str, str]:
        return {"X-Actor-Id": actor.id, "X-Actor-Role": actor.role.value}

    return _headers
