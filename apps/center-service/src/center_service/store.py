from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
import json
import logging
from typing import Any
from uuid import uuid4

from devkit.config import load_settings
from devkit.db import AsyncDatabaseManager, Base, create_all_tables, create_schema_if_not_exists, is_postgres_dsn
from devkit.timezone import now_utc_iso
from geo_engine.bbox import BoundingBox
from geo_engine.models import Center
from sqlalchemy import Boolean, Float, Integer, String, Text, select
from sqlalchemy.orm import Mapped, mapped_column

logger = logging.getLogger(__name__)


def new_center_id() -> str:
    return uuid4().hex


@dataclass
class ReliefCenter:
    name: str
    address: str
    lat: float
    lng: float
    description: str | None = None
    capacity: int | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    facilities: list[str] = field(default_factory=list)
    is_active: bool = True
    center_id: str = field(default_factory=new_center_id)
    created_at: str = field(default_factory=now_utc_iso)
    updated_at: str = field(default_factory=now_utc_iso)

    def to_candidate(self) -> Center:
        return Center(
            center_id=self.center_id,
            lat=self.lat,
            lng=self.lng,
            active=self.is_active,
            attributes={
                "name": self.name,
                "address": self.address,
                "description": self.description,
                "capacity": self.capacity,
                "contact_phone": self.contact_phone,
                "contact_email": self.contact_email,
                "facilities": list(self.facilities),
                "created_at": self.created_at,
                "updated_at": self.updated_at,
            },
        )


UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "address",
        "lat",
        "lng",
        "description",
        "capacity",
        "contact_phone",
        "contact_email",
        "facilities",
        "is_active",
    }
)

_SETTINGS = load_settings("center-service")
_DB_SCHEMA = "relief" if is_postgres_dsn(_SETTINGS.DATABASE_URL) else None
# LIMIT binds as a signed 64-bit integer on both sqlite and postgres.
_SQL_MAX_LIMIT = 2**63 - 1


class ReliefCenterORM(Base):
    __tablename__ = "relief_centers"
    __table_args__ = {"schema": _DB_SCHEMA} if _DB_SCHEMA else {}

    center_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    lat: Mapped[float] = mapped_column(Float, index=True, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    facilities_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    is_active: Mapped[bool] = mapped_column(Boolean, index=True, nullable=False, default=True)
    created_at: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    updated_at: Mapped[str] = mapped_column(String(64), nullable=False)


class CenterStore:
    """Relief center persistence.

    Backed by SQLAlchemy when a database URL is configured, otherwise by an
    in-process dict that keeps insertion order.
    """

    def __init__(
        self,
        database_url: str | None = None,
        seed: Iterable[ReliefCenter] = (),
    ) -> None:
        self._items: dict[str, ReliefCenter] = {item.center_id: item for item in seed}
        self._db = AsyncDatabaseManager(database_url) if database_url else None
        self._orm_ready = False

    async def list_active(
        self,
        *,
        bbox: BoundingBox | None = None,
        limit: int | None = None,
        newest_first: bool = False,
    ) -> list[Center]:
        if self._db is None:
            items = [item for item in self._items.values() if item.is_active]
            if bbox is not None:
                items = [item for item in items if bbox.contains(item.to_candidate().point)]
            if newest_first:
                items = sorted(items, key=lambda item: item.created_at, reverse=True)
            if limit is not None:
                items = items[:limit]
            return [item.to_candidate() for item in items]

        await self._ensure_orm_ready()

        async def _run(session):
            stmt = select(ReliefCenterORM).where(ReliefCenterORM.is_active.is_(True))
            if bbox is not None:
                stmt = stmt.where(ReliefCenterORM.lat.between(bbox.min_lat, bbox.max_lat))
                if bbox.bounds_longitude:
                    stmt = stmt.where(ReliefCenterORM.lng.between(bbox.min_lng, bbox.max_lng))
            if newest_first:
                stmt = stmt.order_by(ReliefCenterORM.created_at.desc(), ReliefCenterORM.center_id)
            else:
                stmt = stmt.order_by(ReliefCenterORM.created_at, ReliefCenterORM.center_id)
            if limit is not None and limit <= _SQL_MAX_LIMIT:
                stmt = stmt.limit(limit)
            rows = (await session.scalars(stmt)).all()
            if limit is not None:
                rows = rows[:limit]
            return [self._to_entity(row).to_candidate() for row in rows]

        return await self._db.run_with_session(_run)

    async def get_by_id(self, center_id: str) -> ReliefCenter | None:
        if self._db is None:
            return self._items.get(center_id)

        await self._ensure_orm_ready()

        async def _run(session):
            row = await session.get(ReliefCenterORM, center_id)
            return self._to_entity(row) if row else None

        return await self._db.run_with_session(_run)

    async def create(self, center: ReliefCenter) -> ReliefCenter:
        if self._db is None:
            self._items[center.center_id] = center
            logger.info("center_created", extra={"component": "center_service", "center_id": center.center_id})
            return center

        await self._ensure_orm_ready()

        async def _run(session):
            row = ReliefCenterORM(center_id=center.center_id)
            self._apply(row, center)
            session.add(row)
            return self._to_entity(row)

        saved = await self._db.run_with_session(_run)
        logger.info("center_created", extra={"component": "center_service", "center_id": saved.center_id})
        return saved

    async def update(self, center_id: str, changes: dict[str, Any]) -> ReliefCenter | None:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"unknown center fields: {', '.join(sorted(unknown))}")
        changes = {**changes, "updated_at": now_utc_iso()}

        if self._db is None:
            current = self._items.get(center_id)
            if current is None:
                return None
            updated = replace(current, **changes)
            self._items[center_id] = updated
            logger.info("center_updated", extra={"component": "center_service", "center_id": center_id})
            return updated

        await self._ensure_orm_ready()

        async def _run(session):
            row = await session.get(ReliefCenterORM, center_id)
            if row is None:
                return None
            self._apply(row, replace(self._to_entity(row), **changes))
            return self._to_entity(row)

        updated = await self._db.run_with_session(_run)
        if updated is not None:
            logger.info("center_updated", extra={"component": "center_service", "center_id": center_id})
        return updated

    async def delete(self, center_id: str) -> bool:
        if self._db is None:
            removed = self._items.pop(center_id, None) is not None
        else:
            await self._ensure_orm_ready()

            async def _run(session):
                row = await session.get(ReliefCenterORM, center_id)
                if row is None:
                    return False
                await session.delete(row)
                return True

            removed = await self._db.run_with_session(_run)
        if removed:
            logger.info("center_deleted", extra={"component": "center_service", "center_id": center_id})
        return removed

    async def close(self) -> None:
        if self._db is not None:
            await self._db.disconnect()
            self._orm_ready = False

    async def _ensure_orm_ready(self) -> None:
        if self._db is None or self._orm_ready:
            return

        await self._db.connect()
        if _DB_SCHEMA:
            await create_schema_if_not_exists(self._db.engine, _DB_SCHEMA)
        await create_all_tables(self._db.engine, Base.metadata)

        if self._items:
            seed = list(self._items.values())

            async def _seed(session):
                for item in seed:
                    if await session.get(ReliefCenterORM, item.center_id) is None:
                        row = ReliefCenterORM(center_id=item.center_id)
                        self._apply(row, item)
                        session.add(row)

            await self._db.run_with_session(_seed)
        self._orm_ready = True

    @staticmethod
    def _apply(row: ReliefCenterORM, center: ReliefCenter) -> None:
        row.name = center.name
        row.address = center.address
        row.description = center.description
        row.lat = center.lat
        row.lng = center.lng
        row.capacity = center.capacity
        row.contact_phone = center.contact_phone
        row.contact_email = center.contact_email
        row.facilities_json = json.dumps(list(center.facilities), ensure_ascii=True)
        row.is_active = center.is_active
        row.created_at = center.created_at
        row.updated_at = center.updated_at

    @staticmethod
    def _to_entity(row: ReliefCenterORM) -> ReliefCenter:
        try:
            facilities = json.loads(row.facilities_json) if row.facilities_json else []
        except ValueError:
            facilities = None
        if not isinstance(facilities, list):
            logger.warning(
                "center_facilities_corrupt",
                extra={"component": "center_service", "center_id": row.center_id},
            )
            facilities = []
        return ReliefCenter(
            center_id=row.center_id,
            name=row.name,
            address=row.address,
            description=row.description,
            lat=row.lat,
            lng=row.lng,
            capacity=row.capacity,
            contact_phone=row.contact_phone,
            contact_email=row.contact_email,
            facilities=[str(item) for item in facilities],
            is_active=row.is_active,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
