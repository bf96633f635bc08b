"""
Shared fixtures for docarchive tests.

Every test gets its own in-memory SQLite database. Environment is set before
any ``docarchive`` import because ``docarchive.config.settings`` is read at
import time.
"""

import os

os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_MAX_CALLS"] = "1000"
os.environ.pop("EXTERNAL_SERVICE_KEY", None)
os.environ.pop("LOGIN_CASEFOLD_EMAIL", None)

import pytest
from fastapi.testclient import TestClient

from docarchive.auth.deps import get_db
from docarchive.auth.service import register_user
from docarchive.db.session import Base, make_engine, make_sessionmaker
from docarchive.documents.service import create_document
from docarchive.models import document as _document_models  # noqa: F401
from docarchive.models import user as _user_models  # noqa: F401
from docarchive.schemas.document import DocumentCreate
from docarchive.utils.security import TokenIssuer

TEST_SECRET = "test-secret-key"
DEFAULT_PASSWORD = "longenough1"


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_sessionmaker(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, 60)


@pytest.fixture
def app(session_factory):
    from docarchive.main import create_app

    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


# =============================================================================
# DATA HELPERS
# =============================================================================


def make_user(db, issuer, email="u@test.com", password=DEFAULT_PASSWORD, name="U"):
    user, _token = register_user(db, issuer, email, password, name)
    return user


def doc_input(**overrides) -> DocumentCreate:
    data = {
        "filename": "invoice.pdf",
        "original_filename": "Invoice March.pdf",
        "file_type": "PDF",
        "file_size": 1024,
        "file_path": "/uploads/invoice.pdf",
        "content_text": None,
        "metadata": None,
        "upload_source": "WEB_INTERFACE",
    }
    data.update(overrides)
    return DocumentCreate(**data)


def make_doc(db, owner_id, **overrides):
    return create_document(db, doc_input(**overrides), owner_id)


@pytest.fixture
def user(db, issuer):
    return make_user(db, issuer)


@pytest.fixture
def other_user(db, issuer):
    return make_user(db, issuer, email="other@test.com", name="Other")
