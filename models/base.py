"""
Declarative base shared by all Seraglio models
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
