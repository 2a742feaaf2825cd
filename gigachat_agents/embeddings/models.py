"""Embedding data models."""

import math

from pydantic import BaseModel, Field, field_validator


class EmbeddingResult(BaseModel):
    """Vector returned by the embedding service for one input.

    The input text is not kept; label and event texts can be long and
    callers already hold them.
    """

    embedding: list[float] = Field(min_length=1, description="Embedding vector")
    model: str = Field(description="Model used for embedding")

    @field_validator("embedding")
    @classmethod
    def _finite(cls, value: list[float]) -> list[float]:
        if not all(math.isfinite(x) for x in value):
            raise ValueError("embedding contains non-finite values")
        return value

    @property
    def dimensions(self) -> int:
        """Number of dimensions in the embedding."""
        return len(self.embedding)
