from pydantic import BaseModel, Field, computed_field, ConfigDict
from typing import List, Optional

from mailshort_app.services.sizing import SIZE_MESSAGES, SizeClass


class RewriteRequestBody(BaseModel):
    html: str = Field(..., description="Email HTML to rewrite")
    filename: Optional[str] = Field(None, description="Original filename, for the job record")
    retry_original: Optional[str] = Field(
        None, description="Retry only this URL (single-link retry mode)"
    )
    job_id: Optional[int] = Field(None, description="Job to attach a retry to")
    owner_id: Optional[str] = None


class LinkResultResponse(BaseModel):
    original: str
    short_url: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class RewriteResponse(BaseModel):
    """Serializes a RewriteResult straight from its attributes"""
    job_id: int
    filename: str
    bytes_in: int
    bytes_out: int
    saved: int
    size_class: SizeClass
    html: str
    links: List[LinkResultResponse]

    @computed_field
    @property
    def size_message(self) -> str:
        return SIZE_MESSAGES[self.size_class]

    model_config = ConfigDict(from_attributes=True)


class SizeCheckRequest(BaseModel):
    html: str


class SizeCheckResponse(BaseModel):
    bytes: int
    size_class: SizeClass
    message: str
