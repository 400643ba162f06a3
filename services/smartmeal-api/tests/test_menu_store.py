"""
Tests for the in-memory and SQL menu stores.
"""

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from smartmeal_api.database import Base
from smartmeal_api.domain import DayMenu, Meal, MealType, MenuStatus, NewWeeklyMenu
from smartmeal_api.services.menu_store import InMemoryMenuStore, SqlMenuStore, generate_id


@pytest.fixture
def new_menu(catalog):
    recipe = catalog.all()[0]
    day = DayMenu(
        date=date(2024, 1, 1),
        meals=[
            Meal(
                id="meal_aaa",
                recipe=recipe,
                date=date(2024, 1, 1),
                meal_type=MealType.BREAKFAST,
                servings=2,
            )
        ],
    )
    day.recalculate()
    return NewWeeklyMenu(
        user_id="user_001",
        name="Menu 1/1/2024 - 1/1/2024",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 1),
        days=[day],
        total_days=1,
        meals_per_day=[MealType.BREAKFAST],
        max_calories_per_day=2000,
        servings_per_meal=2,
    )


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{(tmp_path / 'menus.db').as_posix()}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield SqlMenuStore(session)
    await engine.dispose()


def test_generate_id():
    menu_id = generate_id("menu_")
    assert menu_id.startswith("menu_")
    assert len(menu_id) == len("menu_") + 9
    assert menu_id[5:].isalnum() and menu_id[5:].lower() == menu_id[5:]
    assert generate_id("meal_") != generate_id("meal_")


class TestInMemoryMenuStore:
    """Tests for InMemoryMenuStore."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamps(self, menu_store, new_menu):
        menu = await menu_store.create(new_menu)

        assert menu.id.startswith("menu_")
        assert menu.created_at == menu.updated_at
        assert menu.status == MenuStatus.PENDING
        assert menu.days == new_menu.days

    @pytest.mark.asyncio
    async def test_find_by_id(self, menu_store, new_menu):
        menu = await menu_store.create(new_menu)
        assert await menu_store.find_by_id(menu.id) == menu
        assert await menu_store.find_by_id("menu_missing") is None

    @pytest.mark.asyncio
    async def test_reads_do_not_alias_stored_state(self, menu_store, new_menu):
        menu = await menu_store.create(new_menu)

        fetched = await menu_store.find_by_id(menu.id)
        fetched.days[0].meals.clear()
        fetched.days[0].total_calories = 0

        stored = await menu_store.find_by_id(menu.id)
        assert len(stored.days[0].meals) == 1
        assert stored.days[0].total_calories == 360

    @pytest.mark.asyncio
    async def test_find_by_user_id(self, menu_store, new_menu):
        first = await menu_store.create(new_menu)
        second = await menu_store.create(new_menu)
        await menu_store.create(new_menu.model_copy(update={"user_id": "user_002"}))

        menus = await menu_store.find_by_user_id("user_001")

        assert {m.id for m in menus} == {first.id, second.id}
        assert await menu_store.find_by_user_id("nobody") == []

    @pytest.mark.asyncio
    async def test_update_status(self, menu_store, new_menu):
        menu = await menu_store.create(new_menu)

        updated = await menu_store.update(menu.id, status=MenuStatus.ACTIVE)

        assert updated.status == MenuStatus.ACTIVE
        assert updated.id == menu.id
        assert updated.created_at == menu.created_at
        assert updated.updated_at >= menu.created_at
        assert (await menu_store.find_by_id(menu.id)).status == MenuStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_update_days(self, menu_store, new_menu):
        menu = await menu_store.create(new_menu)
        days = [DayMenu(date=date(2024, 1, 1))]

        updated = await menu_store.update(menu.id, days=days)

        assert updated.days == days

    @pytest.mark.asyncio
    async def test_update_missing_menu_returns_none(self, menu_store):
        assert await menu_store.update("menu_missing", status=MenuStatus.ACTIVE) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["id", "user_id", "created_at", "updated_at", "colour"])
    async def test_update_rejects_protected_and_unknown_fields(self, menu_store, new_menu, field):
        menu = await menu_store.create(new_menu)
        with pytest.raises(ValueError):
            await menu_store.update(menu.id, **{field: "x"})

    @pytest.mark.asyncio
    async def test_delete_by_user_id(self, menu_store, new_menu):
        await menu_store.create(new_menu)
        await menu_store.create(new_menu)
        other = await menu_store.create(new_menu.model_copy(update={"user_id": "user_002"}))

        assert await menu_store.delete_by_user_id("user_001") == 2
        assert await menu_store.find_by_user_id("user_001") == []
        assert await menu_store.find_by_id(other.id) is not None
        assert await menu_store.delete_by_user_id("user_001") == 0


class TestSqlMenuStore:
    """Tests for SqlMenuStore against a SQLite file."""

    @pytest.mark.asyncio
    async def test_create_and_find(self, sql_store, new_menu):
        menu = await sql_store.create(new_menu)

        found = await sql_store.find_by_id(menu.id)

        assert found == menu
        assert found.days == new_menu.days
        assert found.meals_per_day == [MealType.BREAKFAST]
        assert found.days[0].meals[0].recipe.name == "Avocado Toast"

    @pytest.mark.asyncio
    async def test_find_missing(self, sql_store):
        assert await sql_store.find_by_id("menu_missing") is None
        assert await sql_store.update("menu_missing", status=MenuStatus.ACTIVE) is None

    @pytest.mark.asyncio
    async def test_find_by_user_id(self, sql_store, new_menu):
        menu = await sql_store.create(new_menu)
        await sql_store.create(new_menu.model_copy(update={"user_id": "user_002"}))

        menus = await sql_store.find_by_user_id("user_001")

        assert [m.id for m in menus] == [menu.id]

    @pytest.mark.asyncio
    async def test_update_status_and_days(self, sql_store, new_menu):
        menu = await sql_store.create(new_menu)
        day = menu.days[0].model_copy(deep=True)
        day.meals[0] = day.meals[0].model_copy(update={"id": "meal_bbb"})

        updated = await sql_store.update(menu.id, status=MenuStatus.ACTIVE, days=[day])

        assert updated.status == MenuStatus.ACTIVE
        assert updated.find_meal("meal_bbb") is not None
        assert updated.find_meal("meal_aaa") is None
        assert updated.updated_at >= menu.updated_at
        assert await sql_store.find_by_id(menu.id) == updated

    @pytest.mark.asyncio
    async def test_update_rejects_protected_field(self, sql_store, new_menu):
        menu = await sql_store.create(new_menu)
        with pytest.raises(ValueError):
            await sql_store.update(menu.id, user_id="user_002")

    @pytest.mark.asyncio
    async def test_delete_by_user_id(self, sql_store, new_menu):
        await sql_store.create(new_menu)
        await sql_store.create(new_menu)

        assert await sql_store.delete_by_user_id("user_001") == 2
        assert await sql_store.find_by_user_id("user_001") == []
