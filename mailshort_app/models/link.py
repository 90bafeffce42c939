from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from mailshort_app.database.connection import Base


class Link(Base):
    """
    A short code and its target URL.

    The code is the primary key, so uniqueness is enforced by the store at
    insert time. Two allocations racing on the same random code cannot both
    commit. Links are never mutated.
    """
    __tablename__ = "links"

    code = Column(String(8), primary_key=True)
    original_url = Column(Text, nullable=False)
    owner_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
