import uuid

from sqlalchemy import JSON, BigInteger, Integer, create_engine, event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from replyflow.config import settings

# JSONB/BIGSERIAL in production, plain JSON/INTEGER PK on the sqlite test database.
JSONType = JSONB().with_variant(JSON(), "sqlite")
BigIntegerType = BigInteger().with_variant(Integer(), "sqlite")

Base = declarative_base()


def create_db_engine(database_url: str, **kwargs):
    engine = create_engine(database_url, **kwargs)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _configure_sqlite(dbapi_connection, _connection_record):
            dbapi_connection.create_function("gen_random_uuid", 0, lambda: str(uuid.uuid4()))

    return engine


engine = create_db_engine(settings.database_url, echo=settings.debug, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dialect_insert(db: Session, model):
    """Return an INSERT construct supporting ON CONFLICT for the session's dialect."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)
