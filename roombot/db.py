from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from roombot.config import DATABASE_URL
from roombot.models import Base

engine = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(bind=engine):
    Base.metadata.create_all(bind=bind)
