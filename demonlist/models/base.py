"""
Declarative base shared by all demonlist ORM models.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
