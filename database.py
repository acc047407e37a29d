# database.py
from sqlalchemy.orm import declarative_base

# Declarative base for models/; Alembic owns the schema (alembic/versions)
# and builds its own engine from DATABASE_URL in alembic/env.py.
Base = declarative_base()
