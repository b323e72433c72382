from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from moltly.config import database_url

# Base shared with the model modules so metadata stays in one place
from moltly.models.base import Base

# 1) DATABASE_URL wins (e.g. postgresql+psycopg://...)
# 2) otherwise a SQLite file under data/
SQLALCHEMY_DATABASE_URL = database_url()
_is_sqlite = SQLALCHEMY_DATABASE_URL.startswith("sqlite")

_connect_args = {"check_same_thread": False} if _is_sqlite else {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=_connect_args,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None) -> None:
    # import every model module so its table is registered on Base.metadata
    import moltly.models.user  # noqa: F401
    import moltly.models.molt_entry  # noqa: F401
    import moltly.models.health_entry  # noqa: F401
    import moltly.models.breeding_entry  # noqa: F401
    import moltly.models.research_stack  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
