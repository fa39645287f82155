from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from prepwise.core import config
DATABASE_URL = config.DATABASE_URL

# Feedback writes run in a worker thread, so SQLite must allow cross-thread use
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
