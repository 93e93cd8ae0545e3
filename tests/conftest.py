import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from recipe_catalog.main import app
from recipe_catalog.db import Base, get_db
from recipe_catalog.deps import get_image_storage, limiter
from recipe_catalog.models import Category
from recipe_catalog.schemas import RecipeSpec
from recipe_catalog.services.storage import ImageStorage

# --- Test Database Setup ---

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

# StaticPool: every session shares the one in-memory database
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    limiter.reset()
    yield


@pytest.fixture
def storage(tmp_path):
    """Image storage rooted in a per-test temp directory."""
    return ImageStorage(tmp_path / "imgs")


@pytest.fixture
def client(storage):
    """Test client with DB and image storage overrides."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup and service-level tests."""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def categories(db_session):
    """Seed a few categories, including the reserved pseudo-category."""
    rows = [
        Category(name="Breakfast"),
        Category(name="Dinner"),
        Category(name="Dessert"),
        Category(name="Ingredients"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return {c.name: c.id for c in rows}


@pytest.fixture
def make_spec(categories):
    """Factory for valid RecipeSpec objects (defaults to a Breakfast toast)."""
    def _make(**overrides):
        data = {
            "name": "Toast",
            "category_id": categories["Breakfast"],
            "prep_time": 2,
            "cook_time": 3,
            "servings": 1,
            "instructions": ["Toast bread"],
            "ingredients": [{"name": "Bread", "quantity": "2", "unit": "slices"}],
        }
        data.update(overrides)
        return RecipeSpec.model_validate(data)
    return _make
