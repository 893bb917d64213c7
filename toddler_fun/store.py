# toddler_fun/store.py
"""Data access for the activity catalog.

Every operation is a single statement against the ``activities`` table. Rows
come back as plain dicts with the id rendered as text, which is how the HTTP
layer and the client see them.
"""
import enum
import logging
import sqlite3
from typing import Optional

from databases import Database
from sqlalchemy import delete, insert, select, update
from sqlalchemy import exc as sa_exc

from toddler_fun.models import activities

logger = logging.getLogger(__name__)

PERMISSION_DENIED_SQLSTATE = "42501"


class ErrorKind(str, enum.Enum):
    PERMISSION_DENIED = "permission_denied"
    CONSTRAINT = "constraint"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class StoreError(Exception):
    """A failed store operation, tagged with what kind of failure it was."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details


def _sqlstate(exc: BaseException):
    # asyncpg / psycopg expose ``sqlstate``, psycopg2 ``pgcode``; SQLAlchemy wraps in ``orig``
    for candidate in (exc, getattr(exc, "orig", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def classify_error(exc: BaseException) -> ErrorKind:
    code = _sqlstate(exc)
    if code == PERMISSION_DENIED_SQLSTATE:
        return ErrorKind.PERMISSION_DENIED
    if code is not None:
        if code.startswith("23"):
            return ErrorKind.CONSTRAINT
        if code.startswith("08"):
            return ErrorKind.UNAVAILABLE
        return ErrorKind.UNKNOWN
    if isinstance(exc, (sqlite3.IntegrityError, sa_exc.IntegrityError)):
        return ErrorKind.CONSTRAINT
    if isinstance(exc, (sqlite3.OperationalError, sa_exc.OperationalError, ConnectionError)):
        return ErrorKind.UNAVAILABLE
    return ErrorKind.UNKNOWN


def _to_record(row):
    if row is None:
        return None
    data = dict(row._mapping)
    data["id"] = str(data["id"])
    return data


class ActivityStore:
    def __init__(self, database: Database):
        self.database = database

    async def _fetch_one(self, action: str, query):
        try:
            return await self.database.fetch_one(query)
        except Exception as e:
            raise self._wrap(action, query, e) from e

    async def _fetch_all(self, action: str, query):
        try:
            return await self.database.fetch_all(query)
        except Exception as e:
            raise self._wrap(action, query, e) from e

    def _wrap(self, action: str, query, exc: Exception) -> StoreError:
        kind = classify_error(exc)
        logger.error(f"Store {action} failed ({kind.value}): {exc}\nQuery: {query}")
        return StoreError(f"Failed to {action}", kind=kind, details=str(exc))

    async def list(self):
        query = select(activities).order_by(activities.c.category, activities.c.title)
        rows = await self._fetch_all("list activities", query)
        return [_to_record(r) for r in rows]

    async def get(self, activity_id: int):
        query = select(activities).where(activities.c.id == activity_id)
        return _to_record(await self._fetch_one("get activity", query))

    async def create(self, category: str, title: str, description: str):
        query = (
            insert(activities)
            .values(category=category, title=title, description=description, completion_count=0)
            .returning(*activities.c)
        )
        record = _to_record(await self._fetch_one("create activity", query))
        logger.info(f"Created activity {record['id']} ({title!r})")
        return record

    async def update_fields(
        self,
        activity_id: int,
        category: Optional[str] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ):
        '''Replace the given fields; None means "keep what is stored".'''
        values = {
            k: v
            for k, v in (("category", category), ("title", title), ("description", description))
            if v is not None
        }
        if not values:
            return await self.get(activity_id)
        query = (
            update(activities)
            .where(activities.c.id == activity_id)
            .values(**values)
            .returning(*activities.c)
        )
        return _to_record(await self._fetch_one("update activity", query))

    async def update_counter(self, activity_id: int, count: int):
        '''Overwrite the completion counter with ``count``.'''
        query = (
            update(activities)
            .where(activities.c.id == activity_id)
            .values(completion_count=count)
            .returning(*activities.c)
        )
        return _to_record(await self._fetch_one("update completion count", query))

    async def increment_counter(self, activity_id: int, by: int = 1):
        query = (
            update(activities)
            .where(activities.c.id == activity_id)
            .values(completion_count=activities.c.completion_count + by)
            .returning(*activities.c)
        )
        return _to_record(await self._fetch_one("record completion", query))

    async def delete(self, activity_id: Optional[int] = None, title: Optional[str] = None):
        """Delete one activity by id, or by title when no id is given.

        Returns the deleted id, or None when nothing matched.
        """
        if activity_id is not None:
            condition = activities.c.id == activity_id
        elif title is not None:
            condition = activities.c.title == title
        else:
            raise ValueError("delete() needs an id or a title")
        query = delete(activities).where(condition).returning(activities.c.id)
        row = await self._fetch_one("delete activity", query)
        if row is None:
            return None
        deleted = str(row._mapping["id"])
        logger.info(f"Deleted activity {deleted}")
        return deleted
