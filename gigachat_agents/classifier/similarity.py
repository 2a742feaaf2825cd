"""Vector math for embedding comparison."""

from collections.abc import Sequence
from math import sqrt

from gigachat_agents.exceptions import ErrorCode, SimilarityError


def vector_norm(vector: Sequence[float]) -> float:
    """Euclidean norm of a vector."""
    return sqrt(sum(x * x for x in vector))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors.

    Args:
        a: First vector.
        b: Second vector, same length as ``a``.

    Returns:
        Similarity in [-1, 1].

    Raises:
        SimilarityError: If lengths differ or either vector has zero norm.
    """
    if len(a) != len(b):
        raise SimilarityError(
            f"Vector dimensions differ: {len(a)} != {len(b)}",
            code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
            details={"left": len(a), "right": len(b)},
        )

    norm_a = vector_norm(a)
    norm_b = vector_norm(b)
    if norm_a == 0.0 or norm_b == 0.0:
        raise SimilarityError(
            "Cosine similarity is undefined for a zero-norm vector",
            code=ErrorCode.ZERO_NORM_VECTOR,
        )

    dot = sum(x * y for x, y in zip(a, b, strict=True))
    # Clamp rounding noise so identical vectors never exceed 1.0
    return max(-1.0, min(1.0, dot / (norm_a * norm_b)))
