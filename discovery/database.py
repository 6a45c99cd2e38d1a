"""
Optional registry persistence.

Uses SQLAlchemy 2.0. When REGISTRY_DATABASE_URL is unset the registry
lives only in memory and nothing here is used.
"""

from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Optional

from loguru import logger
from sqlalchemy import JSON, DateTime, Float, Integer, String, create_engine, delete, select
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from discovery.models import GamblingSite, SiteStatus


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class SiteRecord(Base):
    """Persisted registry row. Position keeps the newest-first order."""
    __tablename__ = "gambling_sites"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    site_name: Mapped[str] = mapped_column(String(500), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    first_seen: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_seen: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=SiteStatus.ACTIVE.value)
    source_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sources: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<SiteRecord {self.normalized_name} ({self.status})>"


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class RegistryStore:
    """Snapshots the registry to a database table and loads it back."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine = create_engine(url, echo=echo, pool_pre_ping=True)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    @contextmanager
    def get_session(self):
        """Context manager for database sessions."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def load(self) -> list[GamblingSite]:
        with self.get_session() as session:
            rows = session.scalars(select(SiteRecord).order_by(SiteRecord.position)).all()
            sites = [
                GamblingSite(
                    id=row.id,
                    site_name=row.site_name,
                    normalized_name=row.normalized_name,
                    first_seen=_as_utc(row.first_seen),
                    last_seen=_as_utc(row.last_seen),
                    confidence_score=row.confidence_score,
                    status=SiteStatus(row.status),
                    source_count=row.source_count,
                    sources=list(row.sources or []),
                )
                for row in rows
            ]
        logger.info(f"Loaded {len(sites)} registry records from {self.engine.url.render_as_string()}")
        return sites

    def save(self, sites: list[GamblingSite]) -> None:
        """Replace the stored snapshot with the given records."""
        with self.get_session() as session:
            session.execute(delete(SiteRecord))
            session.add_all(
                SiteRecord(
                    id=site.id,
                    position=position,
                    site_name=site.site_name,
                    normalized_name=site.normalized_name,
                    first_seen=site.first_seen,
                    last_seen=site.last_seen,
                    confidence_score=site.confidence_score,
                    status=site.status.value,
                    source_count=site.source_count,
                    sources=list(site.sources),
                )
                for position, site in enumerate(sites)
            )
        logger.debug(f"Saved {len(sites)} registry records")


def get_store(url: Optional[str]) -> Optional[RegistryStore]:
    """Build a store for the configured URL, or None for in-memory only."""
    if not url:
        return None
    store = RegistryStore(url)
    store.create_all()
    return store
