"""
Pydantic schemas for request bodies.
Fields are optional at the schema level so that a missing value produces the
service's own 400 message instead of a generic validation error.
"""
from typing import Optional
from pydantic import BaseModel, Field


class QuestionCreate(BaseModel):
    """Request body for registering a question."""
    content: Optional[str] = Field(None, description="The question text")


class AnswerCreate(BaseModel):
    """Request body for adding an answer to a question."""
    question_id: Optional[int] = Field(None, description="ID of an existing question")
    content: Optional[str] = Field(None, description="The answer text")


class SearchBody(BaseModel):
    """Request body for semantic search."""
    query: Optional[str] = Field(None, description="Free-form search text")
