from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from mailshort_app.database.connection import Base


class Job(Base):
    """
    One document-rewrite operation and its aggregate statistics.

    bytes_out stays 0 until the rewrite completes. link_count holds the
    number of target URLs at creation and the number of links actually
    shortened once the rewrite has finished.
    """
    __tablename__ = "html_jobs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    filename = Column(String(160), nullable=False)
    bytes_in = Column(Integer, nullable=False)
    bytes_out = Column(Integer, nullable=False, default=0)
    link_count = Column(Integer, nullable=False, default=0)
    owner_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class JobLink(Base):
    """
    Records that a link was produced while processing a job.

    The original URL is duplicated here for traceability. Append-only.
    """
    __tablename__ = "html_links"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("html_jobs.id"), nullable=False, index=True)
    link_code = Column(String(8), ForeignKey("links.code"), nullable=False)
    original_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
