from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from tasktracker.config import DATABASE_URL

IS_SQLITE = DATABASE_URL.startswith("sqlite")

# Only apply sqlite-specific connect_args when using sqlite
connect_args = {"check_same_thread": False} if IS_SQLITE else {}

# Enable pool_pre_ping to avoid stale connections (useful for cloud DBs like Neon)
engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
)

if IS_SQLITE:
    @event.listens_for(engine, "connect")
    def _enforce_foreign_keys(dbapi_conn, _record):
        # SQLite ignores tasks.owner_id -> users.id unless asked per connection
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
