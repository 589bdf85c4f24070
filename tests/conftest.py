"""Shared fixtures: a fresh in-memory SQLite database per test."""

import os

os.environ.setdefault("RECIPEBOX_DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from recipebox.database import create_db_engine, get_db, init_db
from recipebox.main import app
from recipebox.models import RecipeNote, User
from recipebox.recipes import create_recipe
from recipebox.schemas import RecipeCreate


@pytest.fixture
def engine():
    # StaticPool so every session shares the same in-memory database
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(email: str, name: str | None = None) -> User:
        user = User(email=email, name=name)
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def make_recipe(db):
    """Create and commit a recipe through the normal write path."""

    def _make_recipe(user: User, title: str, **fields):
        ingredients = [
            i if isinstance(i, dict) else {"name": i}
            for i in fields.pop("ingredients", [])
        ]
        instructions = [
            s if isinstance(s, dict) else {"instruction": s}
            for s in fields.pop("instructions", [])
        ]
        data = RecipeCreate(
            title=title,
            ingredients=ingredients,
            instructions=instructions,
            **fields,
        )
        recipe = create_recipe(db, user.id, data)
        db.commit()
        return recipe

    return _make_recipe


@pytest.fixture
def add_note(db):
    def _add_note(recipe, user, content: str) -> RecipeNote:
        note = RecipeNote(recipe_id=recipe.id, user_id=user.id, content=content)
        db.add(note)
        db.commit()
        return note

    return _add_note
