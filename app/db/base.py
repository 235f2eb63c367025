# app/db/base.py
from sqlalchemy.orm import declarative_base

# single metadata for every model (alembic autogenerate reads this)
Base = declarative_base()
