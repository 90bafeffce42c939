"""
Database models for the email link shortener.

Jobs and links are transactional data; click events are append-only rows
written by the redirect path (directly or through the click worker).
"""

from .job import Job, JobLink
from .link import Link
from .click import ClickEvent

__all__ = ["Job", "JobLink", "Link", "ClickEvent"]
