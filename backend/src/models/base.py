"""Declarative base shared by all Laraflow models"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
