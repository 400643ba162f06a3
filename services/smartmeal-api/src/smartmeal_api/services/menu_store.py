"""Menu storage - repository contract plus in-memory and SQL implementations"""

import secrets
import string
from enum import Enum
from typing import Any, Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from smartmeal_api.database import WeeklyMenuRecord, utcnow
from smartmeal_api.domain import NewWeeklyMenu, WeeklyMenu

ID_ALPHABET = string.ascii_lowercase + string.digits
JSON_FIELDS = {"days", "meals_per_day"}


def generate_id(prefix: str, length: int = 9) -> str:
    """Random base-36 identifier such as ``menu_k3j9x0a1b``."""
    return prefix + "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


class MenuStore(Protocol):
    """
    Storage contract for generated menus.

    Each call is its own atomic unit; there is no locking, so concurrent
    updates of the same menu resolve as last writer wins.
    """

    async def find_by_user_id(self, user_id: str) -> list[WeeklyMenu]: ...

    async def find_by_id(self, menu_id: str) -> WeeklyMenu | None: ...

    async def create(self, menu: NewWeeklyMenu) -> WeeklyMenu: ...

    async def update(self, menu_id: str, **changes: Any) -> WeeklyMenu | None: ...

    async def delete_by_user_id(self, user_id: str) -> int: ...


class InMemoryMenuStore:
    """Dict-backed store. Hands out copies so callers never alias stored state."""

    def __init__(self):
        self._menus: dict[str, WeeklyMenu] = {}

    async def find_by_user_id(self, user_id: str) -> list[WeeklyMenu]:
        menus = [menu.model_copy(deep=True) for menu in self._menus.values() if menu.user_id == user_id]
        return sorted(menus, key=lambda m: m.created_at, reverse=True)

    async def find_by_id(self, menu_id: str) -> WeeklyMenu | None:
        menu = self._menus.get(menu_id)
        return menu.model_copy(deep=True) if menu else None

    async def create(self, menu: NewWeeklyMenu) -> WeeklyMenu:
        menu_id = generate_id("menu_")
        while menu_id in self._menus:
            menu_id = generate_id("menu_")

        now = utcnow()
        stored = WeeklyMenu(id=menu_id, created_at=now, updated_at=now, **menu.model_dump())
        self._menus[menu_id] = stored
        return stored.model_copy(deep=True)

    async def update(self, menu_id: str, **changes: Any) -> WeeklyMenu | None:
        menu = self._menus.get(menu_id)
        if menu is None:
            return None

        data = menu.model_dump()
        data.update(_dump_changes(changes))
        data["updated_at"] = utcnow()
        updated = WeeklyMenu.model_validate(data)
        self._menus[menu_id] = updated
        return updated.model_copy(deep=True)

    async def delete_by_user_id(self, user_id: str) -> int:
        menu_ids = [menu_id for menu_id, menu in self._menus.items() if menu.user_id == user_id]
        for menu_id in menu_ids:
            del self._menus[menu_id]
        return len(menu_ids)


class SqlMenuStore:
    """Store backed by the weekly_menus table of an async SQLAlchemy session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_user_id(self, user_id: str) -> list[WeeklyMenu]:
        result = await self.db.execute(
            select(WeeklyMenuRecord)
            .where(WeeklyMenuRecord.user_id == user_id)
            .order_by(WeeklyMenuRecord.created_at.desc())
        )
        return [_to_domain(record) for record in result.scalars().all()]

    async def find_by_id(self, menu_id: str) -> WeeklyMenu | None:
        record = await self.db.get(WeeklyMenuRecord, menu_id)
        return _to_domain(record) if record else None

    async def create(self, menu: NewWeeklyMenu) -> WeeklyMenu:
        data = menu.model_dump(mode="json")
        now = utcnow()
        record = WeeklyMenuRecord(
            id=generate_id("menu_"),
            user_id=menu.user_id,
            name=menu.name,
            start_date=menu.start_date,
            end_date=menu.end_date,
            status=menu.status.value,
            total_days=menu.total_days,
            meals_per_day=data["meals_per_day"],
            max_calories_per_day=menu.max_calories_per_day,
            servings_per_meal=menu.servings_per_meal,
            days=data["days"],
            created_at=now,
            updated_at=now,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return _to_domain(record)

    async def update(self, menu_id: str, **changes: Any) -> WeeklyMenu | None:
        record = await self.db.get(WeeklyMenuRecord, menu_id)
        if record is None:
            return None

        _dump_changes(changes)
        for field, value in changes.items():
            if field in JSON_FIELDS:
                value = _dump_value(value, "json")
            elif isinstance(value, Enum):
                value = value.value
            setattr(record, field, value)
        record.updated_at = utcnow()

        await self.db.commit()
        await self.db.refresh(record)
        return _to_domain(record)

    async def delete_by_user_id(self, user_id: str) -> int:
        result = await self.db.execute(delete(WeeklyMenuRecord).where(WeeklyMenuRecord.user_id == user_id))
        await self.db.commit()
        return result.rowcount or 0


def _dump_changes(changes: dict[str, Any]) -> dict[str, Any]:
    """Check and serialize partial updates; identity and timestamps never change."""
    protected = {"id", "user_id", "created_at", "updated_at"}
    dumped = {}
    for field, value in changes.items():
        if field in protected:
            raise ValueError(f"Field cannot be updated: {field}")
        if field not in WeeklyMenu.model_fields:
            raise ValueError(f"Unknown menu field: {field}")
        dumped[field] = _dump_value(value, "python")
    return dumped


def _dump_value(value: Any, mode: str) -> Any:
    if isinstance(value, list):
        return [_dump_value(item, mode) for item in value]
    if hasattr(value, "model_dump"):
        return value.model_dump(mode=mode)
    if mode == "json" and isinstance(value, Enum):
        return value.value
    return value


def _to_domain(record: WeeklyMenuRecord) -> WeeklyMenu:
    return WeeklyMenu.model_validate(
        {
            "id": record.id,
            "user_id": record.user_id,
            "name": record.name,
            "start_date": record.start_date,
            "end_date": record.end_date,
            "days": record.days,
            "status": record.status,
            "total_days": record.total_days,
            "meals_per_day": record.meals_per_day,
            "max_calories_per_day": record.max_calories_per_day,
            "servings_per_meal": record.servings_per_meal,
            "created_at": record.created_at,
            "updated_at": record.updated_at,
        }
    )
