"""Shared metadata for all staff-related tables."""

from sqlalchemy import MetaData

metadata = MetaData()
