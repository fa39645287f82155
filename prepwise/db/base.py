"""
Declarative base shared by the user, interview and feedback tables.
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# prepwise.db.models registers every table on Base.metadata; import it
# (as init_db, alembic/env.py and the test conftest do) before create_all.
