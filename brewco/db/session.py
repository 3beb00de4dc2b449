from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool
from brewco.core.config import settings

class Base(DeclarativeBase): pass

def make_engine(dsn: str):
    url = make_url(dsn)
    if url.get_backend_name() == 'sqlite':
        kwargs = {'connect_args': {'check_same_thread': False}}
        # in-memory sqlite lives on a single connection
        if url.database in (None, '', ':memory:'):
            kwargs['poolclass'] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)

engine = make_engine(settings.POSTGRES_DSN)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
