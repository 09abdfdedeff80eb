from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from config import config

engine = create_engine(config.get_database_url(), pool_pre_ping=True)
GradingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def grading_session(factory=None) -> Iterator[Session]:
    """Session for one grading run; uncommitted work is rolled back on error."""
    session = (factory or GradingSession)()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
