"""
Подключение к базе данных (SQLAlchemy)
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from habit_tracker.config import DATABASE_URL

# SQLite требует отключения проверки потока для работы с FastAPI
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency: сессия БД на время запроса"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
