# agroshop/data/database.py
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from agroshop.utils.settings import DATABASE_URL


Base = declarative_base()


def build_engine(url: str | None = None) -> Engine:
    url = url or DATABASE_URL

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # baza w pamieci musi byc wspoldzielona przez wszystkie sesje
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_store(request: Request):
    """FastAPI dependency - magazyn dokumentow wstrzykniety w create_app."""
    return request.app.state.store
