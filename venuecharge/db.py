"""
Storage abstraction for Postgres and an in-memory development implementation.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Protocol, TypeVar

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    Text,
    create_engine,
    func,
    select,
    text,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from starlette.concurrency import run_in_threadpool

from venuecharge.schemas import (
    InsertAdvertiser,
    InsertContactSubmission,
    InsertUser,
    InsertVenue,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")

DEFAULT_CONTACT_STATUS = "new"
DEFAULT_NUMBER_OF_STATIONS = 1

# Serial primary keys are positive int4 values.
MAX_SERIAL_ID = 2**31 - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DatabaseNotConnectedError(RuntimeError):
    """Raised on writes when no database URL was configured."""

    def __init__(self, message: str = "Database not connected"):
        super().__init__(message)


class StorageClient(Protocol):
    """Interface for site data access. Every operation is awaitable."""

    async def get_user(self, user_id: int) -> Optional["UserRecord"]:
        ...

    async def get_user_by_username(self, username: str) -> Optional["UserRecord"]:
        ...

    async def create_user(self, user: InsertUser) -> "UserRecord":
        ...

    async def create_contact_submission(
        self, submission: InsertContactSubmission
    ) -> "ContactSubmissionRecord":
        ...

    async def get_contact_submissions(self) -> list["ContactSubmissionRecord"]:
        ...

    async def create_venue(self, venue: InsertVenue) -> "VenueRecord":
        ...

    async def get_venues(self) -> list["VenueRecord"]:
        ...

    async def get_venue(self, venue_id: int) -> Optional["VenueRecord"]:
        ...

    async def create_advertiser(
        self, advertiser: InsertAdvertiser
    ) -> "AdvertiserRecord":
        ...

    async def get_advertisers(self) -> list["AdvertiserRecord"]:
        ...

    async def get_advertiser(
        self, advertiser_id: int
    ) -> Optional["AdvertiserRecord"]:
        ...


@dataclass
class UserRecord:
    id: int
    username: str
    password: str

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class ContactSubmissionRecord:
    id: int
    name: str
    email: str
    business: str
    phone: Optional[str] = None
    message: Optional[str] = None
    status: str = DEFAULT_CONTACT_STATUS
    created_at: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class VenueRecord:
    id: int
    name: str
    contact_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    number_of_stations: Optional[int] = DEFAULT_NUMBER_OF_STATIONS
    is_active: Optional[bool] = True
    installation_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class AdvertiserRecord:
    id: int
    name: str
    contact_name: str
    email: str
    phone: Optional[str] = None
    industry: Optional[str] = None
    address: Optional[str] = None
    package_type: Optional[str] = None
    is_active: Optional[bool] = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return asdict(self)


def _is_serial_id(value: int) -> bool:
    return 0 < value <= MAX_SERIAL_ID


def _insert_values(payload) -> dict:
    # Explicit nulls fall back to column defaults, same as omitted fields.
    return payload.model_dump(exclude_none=True)


class InMemoryStorageClient:
    """Simple in-memory store for development and tests.

    Username uniqueness is not enforced here; only the database
    backend's unique constraint rejects duplicates.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        """Clear all stored data and restart id counters (useful in tests)."""
        self.users: Dict[int, UserRecord] = {}
        self.contact_submissions: Dict[int, ContactSubmissionRecord] = {}
        self.venues: Dict[int, VenueRecord] = {}
        self.advertisers: Dict[int, AdvertiserRecord] = {}
        self._next_ids: Dict[str, int] = {
            "users": 1,
            "contact_submissions": 1,
            "venues": 1,
            "advertisers": 1,
        }

    def _store(self, table: str, build: Callable[[int], "RecordT"]) -> "RecordT":
        # Counter read, increment and insert happen under one lock.
        with self._lock:
            record_id = self._next_ids[table]
            self._next_ids[table] = record_id + 1
            record = build(record_id)
            getattr(self, table)[record_id] = record
        return record

    async def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.username == username:
                return user
        return None

    async def create_user(self, user: InsertUser) -> UserRecord:
        values = _insert_values(user)
        return self._store("users", lambda id_: UserRecord(id=id_, **values))

    async def create_contact_submission(
        self, submission: InsertContactSubmission
    ) -> ContactSubmissionRecord:
        values = _insert_values(submission)
        return self._store(
            "contact_submissions",
            lambda id_: ContactSubmissionRecord(
                id=id_,
                status=DEFAULT_CONTACT_STATUS,
                created_at=_utcnow(),
                **values,
            ),
        )

    async def get_contact_submissions(self) -> list[ContactSubmissionRecord]:
        return list(self.contact_submissions.values())

    async def create_venue(self, venue: InsertVenue) -> VenueRecord:
        values = _insert_values(venue)
        # A missing or zero station count falls back to the default.
        if not values.get("number_of_stations"):
            values["number_of_stations"] = DEFAULT_NUMBER_OF_STATIONS
        return self._store(
            "venues",
            lambda id_: VenueRecord(
                id=id_,
                is_active=True,
                installation_date=None,
                created_at=_utcnow(),
                **values,
            ),
        )

    async def get_venues(self) -> list[VenueRecord]:
        return list(self.venues.values())

    async def get_venue(self, venue_id: int) -> Optional[VenueRecord]:
        return self.venues.get(venue_id)

    async def create_advertiser(
        self, advertiser: InsertAdvertiser
    ) -> AdvertiserRecord:
        values = _insert_values(advertiser)
        return self._store(
            "advertisers",
            lambda id_: AdvertiserRecord(
                id=id_, is_active=True, created_at=_utcnow(), **values
            ),
        )

    async def get_advertisers(self) -> list[AdvertiserRecord]:
        return list(self.advertisers.values())

    async def get_advertiser(
        self, advertiser_id: int
    ) -> Optional[AdvertiserRecord]:
        return self.advertisers.get(advertiser_id)


class PostgresStorageClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    Without a URL every read comes back empty and every write raises
    DatabaseNotConnectedError. Sync sessions run in the threadpool so the
    coroutine methods never block the event loop.
    """

    def __init__(
        self,
        database_url: Optional[str],
        *,
        auto_create_tables: bool = True,
        **engine_kwargs,
    ):
        self.engine = None
        self.Session = None
        if not database_url:
            logger.warning("No database URL configured; storage is disconnected")
            return
        engine_kwargs.setdefault("pool_pre_ping", True)
        self.engine = create_engine(database_url, future=True, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        if auto_create_tables:
            Base.metadata.create_all(self.engine)

    @property
    def connected(self) -> bool:
        return self.Session is not None

    def _require_connection(self) -> None:
        if not self.connected:
            raise DatabaseNotConnectedError()

    # Row conversion

    @staticmethod
    def _to_user_record(row: "UserRow") -> UserRecord:
        return UserRecord(id=row.id, username=row.username, password=row.password)

    @staticmethod
    def _to_contact_record(row: "ContactSubmissionRow") -> ContactSubmissionRecord:
        return ContactSubmissionRecord(
            id=row.id,
            name=row.name,
            email=row.email,
            phone=row.phone,
            business=row.business,
            message=row.message,
            status=row.status,
            created_at=row.created_at,
        )

    @staticmethod
    def _to_venue_record(row: "VenueRow") -> VenueRecord:
        return VenueRecord(
            id=row.id,
            name=row.name,
            contact_name=row.contact_name,
            email=row.email,
            phone=row.phone,
            address=row.address,
            city=row.city,
            state=row.state,
            zip_code=row.zip_code,
            number_of_stations=row.number_of_stations,
            is_active=row.is_active,
            installation_date=row.installation_date,
            notes=row.notes,
            created_at=row.created_at,
        )

    @staticmethod
    def _to_advertiser_record(row: "AdvertiserRow") -> AdvertiserRecord:
        return AdvertiserRecord(
            id=row.id,
            name=row.name,
            contact_name=row.contact_name,
            email=row.email,
            phone=row.phone,
            industry=row.industry,
            address=row.address,
            package_type=row.package_type,
            is_active=row.is_active,
            start_date=row.start_date,
            end_date=row.end_date,
            notes=row.notes,
            created_at=row.created_at,
        )

    # Sync session helpers, run via the threadpool

    def _insert(self, row_cls, values: dict, convert):
        with self.Session() as session:
            row = row_cls(**values)
            session.add(row)
            session.commit()
            session.refresh(row)
            return convert(row)

    def _get_one(self, stmt, convert):
        with self.Session() as session:
            row = session.execute(stmt).scalars().first()
            if not row:
                return None
            return convert(row)

    def _get_all(self, stmt, convert):
        with self.Session() as session:
            return [convert(row) for row in session.execute(stmt).scalars()]

    # Users

    async def get_user(self, user_id: int) -> Optional[UserRecord]:
        if not self.connected or not _is_serial_id(user_id):
            return None
        stmt = select(UserRow).where(UserRow.id == user_id).limit(1)
        return await run_in_threadpool(self._get_one, stmt, self._to_user_record)

    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        if not self.connected:
            return None
        stmt = select(UserRow).where(UserRow.username == username).limit(1)
        return await run_in_threadpool(self._get_one, stmt, self._to_user_record)

    async def create_user(self, user: InsertUser) -> UserRecord:
        self._require_connection()
        return await run_in_threadpool(
            self._insert, UserRow, _insert_values(user), self._to_user_record
        )

    # Contact submissions

    async def create_contact_submission(
        self, submission: InsertContactSubmission
    ) -> ContactSubmissionRecord:
        self._require_connection()
        return await run_in_threadpool(
            self._insert,
            ContactSubmissionRow,
            _insert_values(submission),
            self._to_contact_record,
        )

    async def get_contact_submissions(self) -> list[ContactSubmissionRecord]:
        if not self.connected:
            return []
        stmt = select(ContactSubmissionRow).order_by(
            ContactSubmissionRow.created_at.desc(), ContactSubmissionRow.id.desc()
        )
        return await run_in_threadpool(self._get_all, stmt, self._to_contact_record)

    # Venues

    async def create_venue(self, venue: InsertVenue) -> VenueRecord:
        self._require_connection()
        return await run_in_threadpool(
            self._insert, VenueRow, _insert_values(venue), self._to_venue_record
        )

    async def get_venues(self) -> list[VenueRecord]:
        if not self.connected:
            return []
        stmt = select(VenueRow).order_by(VenueRow.name.asc(), VenueRow.id.asc())
        return await run_in_threadpool(self._get_all, stmt, self._to_venue_record)

    async def get_venue(self, venue_id: int) -> Optional[VenueRecord]:
        if not self.connected or not _is_serial_id(venue_id):
            return None
        stmt = select(VenueRow).where(VenueRow.id == venue_id).limit(1)
        return await run_in_threadpool(self._get_one, stmt, self._to_venue_record)

    # Advertisers

    async def create_advertiser(
        self, advertiser: InsertAdvertiser
    ) -> AdvertiserRecord:
        self._require_connection()
        return await run_in_threadpool(
            self._insert,
            AdvertiserRow,
            _insert_values(advertiser),
            self._to_advertiser_record,
        )

    async def get_advertisers(self) -> list[AdvertiserRecord]:
        if not self.connected:
            return []
        stmt = select(AdvertiserRow).order_by(
            AdvertiserRow.name.asc(), AdvertiserRow.id.asc()
        )
        return await run_in_threadpool(
            self._get_all, stmt, self._to_advertiser_record
        )

    async def get_advertiser(
        self, advertiser_id: int
    ) -> Optional[AdvertiserRecord]:
        if not self.connected or not _is_serial_id(advertiser_id):
            return None
        stmt = select(AdvertiserRow).where(AdvertiserRow.id == advertiser_id).limit(1)
        return await run_in_threadpool(
            self._get_one, stmt, self._to_advertiser_record
        )


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False, unique=True)
    password = Column(Text, nullable=False)


class ContactSubmissionRow(Base):
    __tablename__ = "contact_submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    business = Column(Text, nullable=False)
    message = Column(Text, nullable=True)
    status = Column(
        Text,
        nullable=False,
        default=DEFAULT_CONTACT_STATUS,
        server_default=DEFAULT_CONTACT_STATUS,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )


class VenueRow(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    contact_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    city = Column(Text, nullable=True)
    state = Column(Text, nullable=True)
    zip_code = Column(Text, nullable=True)
    number_of_stations = Column(
        Integer,
        default=DEFAULT_NUMBER_OF_STATIONS,
        server_default=str(DEFAULT_NUMBER_OF_STATIONS),
    )
    is_active = Column(Boolean, default=True, server_default=text("true"))
    installation_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )


class AdvertiserRow(Base):
    __tablename__ = "advertisers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    contact_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    industry = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    package_type = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, server_default=text("true"))
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
