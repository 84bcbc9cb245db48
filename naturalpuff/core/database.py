"""Engine and session. PostgreSQL in production (psycopg3), SQLite for local runs and tests."""
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from .config import settings

_PSYCOPG = "postgresql+psycopg://"


def _normalized_database_url(raw_url: str) -> str:
    """Hosted Postgres URLs (postgres://, postgresql://) get the psycopg3 driver; others pass through."""
    url = (raw_url or "").strip()
    if not url:
        return "sqlite:///./naturalpuff.db"
    scheme, sep, rest = url.partition("://")
    if sep and scheme in ("postgres", "postgresql"):
        return _PSYCOPG + rest
    return url


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options: dict = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url:
        # One shared connection, otherwise every session sees its own empty database
        options["poolclass"] = StaticPool
    return options


DATABASE_URL = _normalized_database_url(settings.database_url)
engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))


def get_db():
    with Session(engine) as session:
        yield session


def init_db():
    """Creates missing tables only. Column changes on PostgreSQL go through Alembic."""
    import naturalpuff.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def supports_row_level_security() -> bool:
    return engine.dialect.name == "postgresql"
