"""Meetroom: RBAC, users, and meeting rooms over FastAPI and SQLAlchemy."""

__version__ = "0.1.0"
