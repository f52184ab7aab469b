import os

# Must be set before config / database are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")
os.environ["AWS_BUCKET_NAME"] = "skillgap-test-bucket"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["IDENTITY_WEBHOOK_SECRET"] = "whsec_dGVzdC13ZWJob29rLXNlY3JldA=="

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from auth import get_generator
from fakes import FakeGenerator


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def client(generator):
    from main import app

    app.dependency_overrides[get_generator] = lambda: generator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
