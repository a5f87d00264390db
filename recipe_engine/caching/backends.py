"""Persistence collaborators for the recipe cache table.

Every backend stores ``CacheRecord`` rows with the same layout:

    id, fingerprint (unique), payload, hit_count, last_accessed,
    created_at, sequence

Backends are dumb storage: they never decide what to evict. All I/O
failures are raised as ``CacheUnavailableError`` so the cache store can
degrade them to a miss.

Usage:
    backend = JsonFileCacheBackend(cache_dir=".cache/recipes")
    cache = RecipeCache(backend, ttl_hours=24, max_entries=1000)
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from recipe_engine.data_layer.errors import CacheUnavailableError

log = logging.getLogger("recipe_engine.caching.backends")


@dataclass
class CacheRecord:
    """One row of the cache table.

    Attributes:
        id: Row identifier (uuid4 hex)
        fingerprint: Request fingerprint (unique)
        payload: Serialised payload (see models.payload_to_dict)
        hit_count: Number of times the entry was written or read (>= 1)
        last_accessed: Time of the last read or write (UTC)
        created_at: Time of the last write (UTC)
        sequence: Monotonic insertion counter, breaks eviction ties
    """
    id: str
    fingerprint: str
    payload: Dict[str, Any]
    hit_count: int
    last_accessed: datetime
    created_at: datetime
    sequence: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialisation."""
        return {
            "id": self.id,
            "fingerprint": self.fingerprint,
            "payload": self.payload,
            "hit_count": self.hit_count,
            "last_accessed": self.last_accessed.isoformat(),
            "created_at": self.created_at.isoformat(),
            "sequence": self.sequence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheRecord":
        """Create CacheRecord from a dictionary written by ``to_dict``."""
        return cls(
            id=data["id"],
            fingerprint=data["fingerprint"],
            payload=data["payload"],
            hit_count=int(data.get("hit_count", 1)),
            last_accessed=datetime.fromisoformat(data["last_accessed"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            sequence=int(data.get("sequence", 0)),
        )


class CacheBackend(ABC):
    """Storage for cache records, keyed by fingerprint."""

    @abstractmethod
    def load(self, fingerprint: str) -> Optional[CacheRecord]:
        """Return the record for fingerprint, or None.

        Raises:
            CacheUnavailableError: If the store cannot be read
        """
        ...

    @abstractmethod
    def save(self, record: CacheRecord) -> None:
        """Insert or replace the record with the same fingerprint.

        Raises:
            CacheUnavailableError: If the store cannot be written
        """
        ...

    @abstractmethod
    def delete(self, fingerprints: Iterable[str]) -> int:
        """Delete records by fingerprint; returns how many were removed."""
        ...

    @abstractmethod
    def records(self) -> List[CacheRecord]:
        """Return every stored record (order unspecified)."""
        ...

    def count(self) -> int:
        return len(self.records())

    def close(self) -> None:
        """Release any held resources."""


class InMemoryCacheBackend(CacheBackend):
    """Dict-backed storage; records are copied in and out."""

    def __init__(self) -> None:
        self._rows: Dict[str, CacheRecord] = {}

    def load(self, fingerprint: str) -> Optional[CacheRecord]:
        record = self._rows.get(fingerprint)
        return copy.deepcopy(record) if record is not None else None

    def save(self, record: CacheRecord) -> None:
        self._rows[record.fingerprint] = copy.deepcopy(record)

    def delete(self, fingerprints: Iterable[str]) -> int:
        removed = 0
        for fp in fingerprints:
            if self._rows.pop(fp, None) is not None:
                removed += 1
        return removed

    def records(self) -> List[CacheRecord]:
        return [copy.deepcopy(record) for record in self._rows.values()]

    def count(self) -> int:
        return len(self._rows)


class JsonFileCacheBackend(CacheBackend):
    """Disk-based storage, one JSON file per fingerprint.

    Files are human-readable for easy inspection and debugging. A
    corrupted file reads as a miss and is overwritten on the next save.
    """

    DEFAULT_CACHE_DIR = ".cache/recipes"

    def __init__(self, cache_dir: Optional[str] = None):
        """Initialize backend with directory path.

        Args:
            cache_dir: Directory for cache files (created if not exists)
        """
        self.cache_dir = Path(cache_dir or self.DEFAULT_CACHE_DIR)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheUnavailableError("open", str(e)) from e

    def load(self, fingerprint: str) -> Optional[CacheRecord]:
        file_path = self._get_file_path(fingerprint)
        if not file_path.exists():
            return None
        return self._read_file(file_path)

    def save(self, record: CacheRecord) -> None:
        file_path = self._get_file_path(record.fingerprint)
        try:
            with open(file_path, "w") as f:
                json.dump(record.to_dict(), f, indent=2)
        except OSError as e:
            raise CacheUnavailableError("save", str(e), record.fingerprint) from e

    def delete(self, fingerprints: Iterable[str]) -> int:
        removed = 0
        for fp in fingerprints:
            file_path = self._get_file_path(fp)
            try:
                file_path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                raise CacheUnavailableError("delete", str(e), fp) from e
        return removed

    def records(self) -> List[CacheRecord]:
        try:
            paths = sorted(self.cache_dir.glob("*.json"))
        except OSError as e:
            raise CacheUnavailableError("scan", str(e)) from e

        found = []
        for path in paths:
            record = self._read_file(path)
            if record is not None:
                found.append(record)
        return found

    def _read_file(self, file_path: Path) -> Optional[CacheRecord]:
        try:
            with open(file_path, "r") as f:
                data = json.load(f)
            return CacheRecord.from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            # Corrupted cache file - treat as miss
            log.warning("Ignoring corrupted cache file %s", file_path)
            return None
        except OSError as e:
            raise CacheUnavailableError("load", str(e), file_path.stem) from e

    def _get_file_path(self, fingerprint: str) -> Path:
        # Fingerprints are hex digests, already filesystem-safe
        return self.cache_dir / f"{fingerprint}.json"


Base = declarative_base()


class CacheRow(Base):
    """SQL table holding the cache records."""

    __tablename__ = "recipe_cache"

    id = Column(String(36), primary_key=True)
    fingerprint = Column(String(64), unique=True, nullable=False, index=True)
    payload = Column(Text, nullable=False)
    hit_count = Column(Integer, nullable=False, default=1)
    last_accessed = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)
    sequence = Column(Integer, nullable=False, default=0)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _from_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlCacheBackend(CacheBackend):
    """SQLAlchemy-backed storage in a ``recipe_cache`` table.

    A session is opened and closed around every operation; nothing holds
    a connection between calls.
    """

    DEFAULT_DATABASE_URL = "sqlite:///data/recipe_cache.db"

    def __init__(self, database_url: Optional[str] = None, engine=None):
        """Initialize backend and create the table if needed.

        Args:
            database_url: SQLAlchemy URL (ignored when engine is given)
            engine: Pre-built SQLAlchemy engine
        """
        url = database_url or self.DEFAULT_DATABASE_URL
        try:
            if engine is None:
                engine = self._create_engine(url)
            Base.metadata.create_all(engine)
        except (SQLAlchemyError, OSError) as e:
            raise CacheUnavailableError("open", str(e)) from e
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @staticmethod
    def _create_engine(url: str):
        if url.startswith("sqlite"):
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, or every session sees an empty database
                return create_engine(
                    url,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            path = url.split("sqlite:///", 1)[-1]
            if path:
                Path(path).parent.mkdir(parents=True, exist_ok=True)
            return create_engine(url, connect_args={"check_same_thread": False})
        return create_engine(url)

    def load(self, fingerprint: str) -> Optional[CacheRecord]:
        try:
            with self._session_factory() as session:
                row = session.execute(
                    select(CacheRow).where(CacheRow.fingerprint == fingerprint)
                ).scalar_one_or_none()
                return self._row_to_record(row) if row is not None else None
        except (SQLAlchemyError, ValueError) as e:
            raise CacheUnavailableError("load", str(e), fingerprint) from e

    def save(self, record: CacheRecord) -> None:
        try:
            with self._session_factory.begin() as session:
                session.execute(
                    delete(CacheRow).where(CacheRow.fingerprint == record.fingerprint)
                )
                session.add(CacheRow(
                    id=record.id,
                    fingerprint=record.fingerprint,
                    payload=json.dumps(record.payload),
                    hit_count=record.hit_count,
                    last_accessed=_to_naive_utc(record.last_accessed),
                    created_at=_to_naive_utc(record.created_at),
                    sequence=record.sequence,
                ))
        except SQLAlchemyError as e:
            raise CacheUnavailableError("save", str(e), record.fingerprint) from e

    def delete(self, fingerprints: Iterable[str]) -> int:
        fingerprints = list(fingerprints)
        if not fingerprints:
            return 0
        try:
            with self._session_factory.begin() as session:
                result = session.execute(
                    delete(CacheRow).where(CacheRow.fingerprint.in_(fingerprints))
                )
                return result.rowcount
        except SQLAlchemyError as e:
            raise CacheUnavailableError("delete", str(e)) from e

    def records(self) -> List[CacheRecord]:
        try:
            with self._session_factory() as session:
                rows = session.execute(select(CacheRow)).scalars().all()
                return [self._row_to_record(row) for row in rows]
        except (SQLAlchemyError, ValueError) as e:
            raise CacheUnavailableError("scan", str(e)) from e

    def count(self) -> int:
        try:
            with self._session_factory() as session:
                return session.execute(select(func.count()).select_from(CacheRow)).scalar_one()
        except SQLAlchemyError as e:
            raise CacheUnavailableError("count", str(e)) from e

    def close(self) -> None:
        self.engine.dispose()

    @staticmethod
    def _row_to_record(row: CacheRow) -> CacheRecord:
        return CacheRecord(
            id=row.id,
            fingerprint=row.fingerprint,
            payload=json.loads(row.payload),
            hit_count=row.hit_count,
            last_accessed=_from_naive_utc(row.last_accessed),
            created_at=_from_naive_utc(row.created_at),
            sequence=row.sequence,
        )
