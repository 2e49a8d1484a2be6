from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.config.settings import settings


def build_engine(url: str) -> Engine:
    """
    create an engine for `url`.
    sqlite gets thread-sharing enabled (handlers run in the threadpool),
    in-memory sqlite also needs a single shared connection.
    """
    if url.startswith("sqlite"):
        database = make_url(url).database
        kwargs = {"connect_args": {"check_same_thread": False}, "echo": False}
        if not database or database == ":memory:":
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        echo=False
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    # plain sessionmaker: every scan owns its session for the lifetime of the iterator
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# engine for the configured database, no connection is opened until first use
engine = build_engine(settings.database_url)