from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from mailshort_app.database.connection import Base


class ClickEvent(Base):
    """
    One traversal of a redirect code.

    ip_hash is a salted one-way digest; the raw client address is never
    stored.
    """
    __tablename__ = "click_events"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    link_code = Column(String(8), ForeignKey("links.code"), nullable=False, index=True)
    ts = Column(DateTime(timezone=True), nullable=False, index=True)
    referer = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    ip_hash = Column(String(64), nullable=True)
