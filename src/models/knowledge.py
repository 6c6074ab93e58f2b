from typing import List, Optional
from pydantic import Field
from src.models.base import CamelModel, MongoBaseModel


class KnowledgeDocument(CamelModel):
    """A retrieved knowledge snippet. Internal context only, never shown to visitors."""
    id: Optional[str] = None
    content: str
    source_type: Optional[str] = None
    source_url: Optional[str] = None
    persona_tags: List[str] = Field(default_factory=list)
    pain_point_tags: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    similarity_score: float = Field(0.0, ge=0, le=1.0)


class KnowledgeRecord(MongoBaseModel):
    """A stored knowledge document with its embedding."""
    content: str
    embedding: List[float]
    source_type: Optional[str] = None
    source_url: Optional[str] = None
    persona_tags: List[str] = Field(default_factory=list)
    pain_point_tags: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
