"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class
    ga_install: Hourly app-install counts synced from Google Analytics

Database Schema:
    ga_app_installs carries a unique constraint over its natural key
    (country_id, session_source_medium, landing_page, shop_id,
    event_datetime) so repeated syncs upsert instead of duplicating rows.

Usage:
    from models.base import Base
    from models.ga_install import GAAppInstall, NATURAL_KEY_COLUMNS

Example:
    # Create the table
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
"""

__all__ = [
    "Base",
    "GAAppInstall",
    "NATURAL_KEY_COLUMNS",
    "UPSERT_COLUMNS",
]
