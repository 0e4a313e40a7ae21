#  Copyright (c) 2026 Fleer
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from .config import DATABASE_URL

# echo=True solo si quieres ver el SQL en consola
engine = create_engine(DATABASE_URL, echo=False)


# Escuchamos el evento en TODOS los motores, pero validamos dentro
# si la conexión específica es SQLite antes de ejecutar el comando.
@event.listens_for(Engine, "connect")
def activar_foreign_keys_sqlite(dbapi_connection, connection_record):
    """Activa el soporte de claves foráneas (Foreign Keys) para conexiones SQLite.

    SQLAlchemy no habilita esto por defecto en SQLite. Se ejecuta automáticamente
    al conectar si el driver es 'sqlite3'.

    Args:
        dbapi_connection: La conexión cruda de la DBAPI.
        connection_record: El registro de contexto de la conexión.
    """
    if "sqlite3" in str(dbapi_connection.__class__.__module__):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()


# expire_on_commit=False: los objetos devueltos por los servicios se leen
# después de cerrar la sesión.
SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)
Base = declarative_base()


@contextmanager
def unidad_de_trabajo():
    """Abre una sesión transaccional: commit al salir, rollback ante cualquier error.

    Todas las escrituras de varias filas (novedad + persona, confirmación +
    persona, reversión + confirmación) se ejecutan dentro de una sola unidad.

    Yields:
        Session: Sesión activa de SQLAlchemy.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
