from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from wealthshare.core.config import DATABASE_URL

# ---------------------
# SQLAlchemy engine / session / Base
# ---------------------
# SQLite is the local substitute for the remote PostgreSQL store
if DATABASE_URL.startswith("sqlite"):
    engine_options = {"connect_args": {"check_same_thread": False}}
else:
    engine_options = {
        "pool_pre_ping": True,  # drops dead connections automatically
        "pool_size": 5,
        "max_overflow": 10,
    }

engine = create_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    **engine_options,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()
