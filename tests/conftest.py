import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from order_api.database import Base, build_engine, get_db
from order_api.main import app


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def create_person(client):
    counter = {"n": 0}

    def _create(first_name="Ana", last_name="Gomez", email=None):
        counter["n"] += 1
        payload = {
            "firstName": first_name,
            "lastName": last_name,
            "email": email or f"person{counter['n']}@x.com",
        }
        response = client.post("/api/person", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_item(client):
    def _create(name="Keyboard", price="10.00"):
        response = client.post("/api/item", json={"name": name, "price": price})
        assert response.status_code == 201, response.text
        return response.json()

    return _create
