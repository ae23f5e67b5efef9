from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from app.core.config import DATABASE_URL, DB_ECHO


def use_immediate_transactions(engine: Engine) -> Engine:
    """
    SQLite ignora FOR UPDATE y pysqlite abre la transacción de escritura recién
    en el primer INSERT. Con BEGIN IMMEDIATE cada transacción toma el lock de
    escritura al empezar, así las validaciones y la escritura ven el mismo estado.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=DB_ECHO, connect_args=connect_args)  # echo=True imprime las queries
if engine.dialect.name == "sqlite":
    use_immediate_transactions(engine)

def create_db_and_tables():
    import app.models  # noqa: F401  registra todas las tablas en el metadata
    SQLModel.metadata.create_all(engine)

def get_session():
    with Session(engine) as session:
        yield session
