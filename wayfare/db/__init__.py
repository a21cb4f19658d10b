"""Persistence layer: enums and SQLAlchemy mapped tables."""
