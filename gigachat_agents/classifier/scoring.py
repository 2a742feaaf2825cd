"""Label scoring and selection.

Pure functions with no I/O and no logging; the pipeline reports what
they return.
"""

from collections.abc import Mapping, Sequence

from pydantic import BaseModel, Field

from gigachat_agents.classifier.similarity import cosine_similarity
from gigachat_agents.exceptions import SimilarityError


class ClassificationResult(BaseModel):
    """Scores for one text against the resolved labels.

    Attributes:
        similarities: Score per successfully scored label.
        labels: Labels whose score reached the threshold, in label order.
        failed_labels: Labels whose vectors could not be compared.
    """

    similarities: dict[str, float] = Field(default_factory=dict)
    labels: list[str] = Field(default_factory=list)
    failed_labels: list[str] = Field(default_factory=list)


def score_labels(
    text_embedding: Sequence[float],
    label_embeddings: Mapping[str, Sequence[float]],
) -> tuple[dict[str, float], list[str]]:
    """Score every label embedding against the text embedding.

    Returns:
        Tuple of (similarity per label, labels that could not be scored).
    """
    similarities: dict[str, float] = {}
    failed: list[str] = []
    for label, embedding in label_embeddings.items():
        try:
            similarities[label] = cosine_similarity(text_embedding, embedding)
        except SimilarityError:
            failed.append(label)
    return similarities, failed


def select_labels(similarities: Mapping[str, float], min_similarity: float) -> list[str]:
    """Labels scoring at or above ``min_similarity``, in mapping order."""
    return [label for label, score in similarities.items() if score >= min_similarity]


def classify(
    text_embedding: Sequence[float],
    label_embeddings: Mapping[str, Sequence[float]],
    min_similarity: float,
) -> ClassificationResult:
    """Score all labels and select those reaching the threshold."""
    similarities, failed = score_labels(text_embedding, label_embeddings)
    return ClassificationResult(
        similarities=similarities,
        labels=select_labels(similarities, min_similarity),
        failed_labels=failed,
    )
