"""
Blog post Pydantic models
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Author(BaseModel):
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)


class AuthorUpdate(BaseModel):
    firstName: Optional[str] = Field(None, min_length=1)
    lastName: Optional[str] = Field(None, min_length=1)


class BlogPost(BaseModel):
    """A post as persisted in the document store"""
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    content: str
    author: Author
    created: datetime

    @property
    def author_name(self) -> str:
        return f"{self.author.firstName} {self.author.lastName}"

    def serialize(self) -> Dict[str, Any]:
        """API representation with the author flattened to one string"""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "author": self.author_name,
            "created": self.created,
        }


class BlogPostCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    author: Author


class BlogPostUpdateRequest(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    author: Optional[AuthorUpdate] = None

    def to_update_fields(self) -> Dict[str, Any]:
        """Dotted-path fields for the supplied values only"""
        updates: Dict[str, Any] = {}
        if self.title is not None:
            updates["title"] = self.title
        if self.content is not None:
            updates["content"] = self.content
        if self.author is not None:
            if self.author.firstName is not None:
                updates["author.firstName"] = self.author.firstName
            if self.author.lastName is not None:
                updates["author.lastName"] = self.author.lastName
        return updates


class BlogPostResponse(BaseModel):
    id: str
    title: str
    content: str
    author: str
    created: datetime
