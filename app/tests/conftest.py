import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("AT_API_KEY", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# FORCE model registration
import app.models  # noqa

from app.db.base import Base
from app.db.session import get_db
from app.core.security import create_access_token, hash_password
from app.main import create_app
from app.models.enums import UserRole
from app.models.user import User
from app.services.auth_service import principal_for
from app.services.quote_ledger import QuoteLedger
from app.services.sms import Notifier
from app.tests.fakes import FakeGateway, FakeSms


@pytest.fixture(scope="function")
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def sms():
    return FakeSms()


@pytest.fixture
def notifier(sms):
    return Notifier(sms)


@pytest.fixture
def ledger(notifier):
    return QuoteLedger(notifier=notifier)


# bcrypt is slow; hash once for every seeded user
_PASSWORD_HASH = hash_password("pass1234")


@pytest.fixture
def make_user(session_factory):
    def _make(email="jane@example.com", name="Jane", role=UserRole.CUSTOMER, phone="+254712345678"):
        with session_factory() as s:
            user = User(
                name=name,
                email=email,
                password_hash=_PASSWORD_HASH,
                role=role.value,
                phone=phone,
            )
            s.add(user)
            s.commit()
            s.refresh(user)
            return user

    return _make


@pytest.fixture
def principal_of():
    return principal_for


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token(principal_for(user))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(session_factory, gateway, sms):
    app = create_app(payment_gateway=gateway, sms_client=sms)

    def override_get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c


@pytest.fixture
def file_session_factory(tmp_path):
    """
    File-backed SQLite: every session gets its own connection, so a commit
    in one session is only visible to another through a fresh read.
    """
    eng = create_engine(f"sqlite:///{tmp_path / 'polymesh.db'}", future=True)
    Base.metadata.create_all(bind=eng)
    try:
        yield sessionmaker(bind=eng, autoflush=False, expire_on_commit=False, future=True)
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture
def shared_quote(file_session_factory, ledger):
    """A pending quote (and its owner) committed to the file-backed database."""
    with file_session_factory() as s:
        owner = User(
            name="Mwangi",
            email="mwangi@example.com",
            password_hash=_PASSWORD_HASH,
            role=UserRole.CUSTOMER.value,
            phone="+254712345678",
        )
        s.add(owner)
        s.commit()
        s.refresh(owner)
        quote = ledger.create(
            s,
            owner_id=owner.id,
            window_count=1,
            measurements=[{"width": 1.0, "height": 1.0}],
            material="fiberglass",
            mesh_type="fixed",
            location="Nairobi",
            warranty="basic",
        )
        return quote, owner
