"""
Shared fixtures for smartmeal-api tests.
"""

import random

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from smartmeal_api.database import close_db, init_db
from smartmeal_api.domain import ActivityLevel, DietType, Gender, Goal, Recipe, UserProfile
from smartmeal_api.services.menu_generator import MenuGeneratorService
from smartmeal_api.services.menu_store import InMemoryMenuStore
from smartmeal_api.services.recipe_catalog import RecipeCatalog, RecipePicker

TEST_PASSWORD = "Testing1234"


class FirstRecipePicker(RecipePicker):
    """Always picks the first candidate, for exact assertions."""

    def pick(self, recipes):
        return recipes[0] if recipes else None


@pytest.fixture
def catalog():
    """The packaged six-recipe seed catalog."""
    return RecipeCatalog.from_yaml()


@pytest.fixture
def menu_store():
    return InMemoryMenuStore()


@pytest.fixture
def service(menu_store, catalog):
    """Generator with a seeded random source."""
    return MenuGeneratorService(menu_store, catalog, picker=RecipePicker(random.Random(42)))


@pytest.fixture
def first_pick_service(menu_store, catalog):
    """Generator that always picks the first recipe of each meal type."""
    return MenuGeneratorService(menu_store, catalog, picker=FirstRecipePicker())


@pytest.fixture
def male_profile():
    """30 year old male, 75 kg, 180 cm, moderately active."""
    return UserProfile(
        user_id="user_001",
        age=30,
        gender=Gender.MALE,
        weight=75,
        height=180,
        activity_level=ActivityLevel.MODERATE,
        goal=Goal.MAINTAIN,
        diet_type=DietType.OMNIVORE,
        restrictions=["gluten_free"],
        allergies=["nuts"],
        favorite_ingredients=["chicken", "broccoli", "rice"],
        disliked_ingredients=["mushrooms", "cilantro"],
        max_daily_calories=2200,
    )


@pytest.fixture
def female_profile():
    """25 year old female, 60 kg, 165 cm, sedentary."""
    return UserProfile(
        user_id="user_002",
        age=25,
        gender=Gender.FEMALE,
        weight=60,
        height=165,
        activity_level=ActivityLevel.SEDENTARY,
    )


@pytest.fixture
def snack_recipe():
    return Recipe(
        id="recipe_snack",
        name="Apple Slices",
        description="Apple slices with peanut butter",
        calories=150,
        ingredients=["1 apple", "1 tbsp peanut butter"],
        instructions=["Slice apple", "Serve with peanut butter"],
        prep_time=3,
        meal_type="snack",
        tags=["vegan", "vegetarian"],
    )


# -----------------------------------------------------------------------------
# HTTP fixtures
# -----------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(tmp_path):
    """HTTP client against the app with a fresh SQLite database."""
    from smartmeal_api.main import create_app

    await init_db(f"sqlite+aiosqlite:///{(tmp_path / 'test.db').as_posix()}")
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await close_db()


async def register_and_login(client, email="test@example.com", name="Test User"):
    """Register a user and return bearer auth headers."""
    response = await client.post(
        "/auth/register",
        json={"email": email, "name": name, "password": TEST_PASSWORD, "confirm_password": TEST_PASSWORD},
    )
    assert response.status_code == 201, response.text

    response = await client.post("/auth/login/json", json={"email": email, "password": TEST_PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def auth_headers(client):
    return await register_and_login(client)
