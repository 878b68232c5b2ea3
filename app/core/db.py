# app/core/db.py
import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # 메모리 DB는 커넥션 하나를 공유해야 테이블이 유지됨
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    # import so every table is registered on Base.metadata
    from app.models import job, profile, user  # noqa: F401

    Base.metadata.create_all(bind=engine)

    backend = engine.url.get_backend_name()
    with engine.connect() as conn:
        if backend == "sqlite":
            rows = conn.execute(text("PRAGMA database_list;")).all()
            logger.info("SQLite DB connected: %s", rows)
        elif backend == "postgresql":
            ver = conn.execute(text("select version()")).scalar_one()
            logger.info("PostgreSQL connected: %s", ver)
        else:
            logger.info("DB backend detected: %s", backend)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
