from sqlalchemy import Column, BigInteger, Integer, String, Text, CHAR, DateTime, UniqueConstraint, Index
from models.base import Base


# Columns identifying one (country, source, landing page, shop, hour) bucket.
# The landing page takes part through its sha256 digest so the unique index
# stays fixed-width regardless of URL length.
NATURAL_KEY_COLUMNS = (
    "country_id",
    "session_source_medium",
    "landing_page_hash",
    "shop_id",
    "event_datetime",
)

# Columns overwritten when a natural key already exists
UPSERT_COLUMNS = (
    "event_count",
    "locale",
    "surface_type",
    "surface_detail",
)


class GAAppInstall(Base):
    """
    Hourly app-install event counts synced from Google Analytics.
    
    Design:
    - One row per natural key (country, source/medium, landing page, shop, hour)
    - Re-running the same report window updates counts in place
    - locale / surface fields are parsed from the landing page query string
    """
    __tablename__ = "ga_app_installs"
    
    # SQLite only autoincrements INTEGER PRIMARY KEY
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    
    # Natural key
    country_id = Column(String(64), nullable=False)
    session_source_medium = Column(String(255), nullable=False)
    landing_page_hash = Column(CHAR(64), nullable=False)  # sha256 hex of landing_page
    shop_id = Column(String(255), nullable=False)
    event_datetime = Column(DateTime, nullable=False, index=True)
    
    # Full landing page as reported
    landing_page = Column(Text, nullable=False)
    
    # Metric
    event_count = Column(Integer, nullable=False, default=0)
    
    # Parsed from landing page
    locale = Column(String(64), nullable=False)
    surface_type = Column(String(255), nullable=False)
    surface_detail = Column(String(255), nullable=False)
    
    __table_args__ = (
        UniqueConstraint(*NATURAL_KEY_COLUMNS, name="uq_ga_app_installs_natural_key"),
        Index("idx_ga_app_installs_shop", "shop_id", "event_datetime"),
    )
