"""
CachedResponse model for persisting response cache entries.
"""

from sqlalchemy import JSON, Column, Float, String

from ai_editor.core.database import Base


class CachedResponse(Base):
    """
    One response cache entry.

    Stores results of idempotent AI calls (key validation pings, research
    lookups) so they survive restarts. Expiry is computed from
    inserted_at + ttl_seconds; rows are removed lazily or by sweep.
    """

    __tablename__ = "cached_responses"

    key = Column(String(255), primary_key=True)
    value = Column(JSON, nullable=True)
    inserted_at = Column(Float, nullable=False)
    ttl_seconds = Column(Float, nullable=False)

    def is_expired(self, now: float) -> bool:
        """Check whether the entry has outlived its TTL."""
        return now >= self.inserted_at + self.ttl_seconds

    def __repr__(self) -> str:
        return f"<CachedResponse(key={self.key[:50]})>"
