"""Lazily populated cache of label embeddings."""

import asyncio
from collections.abc import Iterable, Mapping

from gigachat_agents.embeddings.service import EmbeddingService
from gigachat_agents.exceptions import AuthenticationError, EmbeddingError
from gigachat_agents.logging_config import get_logger
from gigachat_agents.observability.metrics import track_label_cache

logger = get_logger(__name__)


class LabelEmbeddingCache:
    """Maps label text to its embedding for the lifetime of a classifier.

    A label is embedded the first time it is resolved and reused afterwards.
    Entries are never invalidated; labels dropped from the configuration
    simply stop being read.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        initial: Mapping[str, list[float]] | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            embedding_service: Service used to embed missing labels.
            initial: Previously exported embeddings to start from.
        """
        self._embedding_service = embedding_service
        self._embeddings: dict[str, list[float]] = dict(initial or {})
        self._lock = asyncio.Lock()

    def __contains__(self, label: object) -> bool:
        return label in self._embeddings

    def __len__(self) -> int:
        return len(self._embeddings)

    def snapshot(self) -> dict[str, list[float]]:
        """Copy of every cached embedding, for persistence by the host."""
        return {label: list(vector) for label, vector in self._embeddings.items()}

    async def resolve(self, labels: Iterable[str]) -> dict[str, list[float]]:
        """Return embeddings for ``labels``, fetching the missing ones.

        Each missing label is requested once. Labels whose embedding cannot
        be fetched are logged and left out of the result; they are tried
        again on the next call.

        Args:
            labels: Configured labels.

        Returns:
            Embedding per label, in the order given, for cached labels only.
        """
        labels = list(labels)

        async with self._lock:
            missing = [label for label in labels if label not in self._embeddings]
            failures = 0

            if missing:
                logger.info(
                    f"Requesting embeddings for {len(missing)} labels",
                    extra={"labels": missing},
                )

            for label in missing:
                try:
                    result = await self._embedding_service.embed(label)
                except (AuthenticationError, EmbeddingError) as e:
                    failures += 1
                    logger.warning(
                        f"Failed to get embedding for label: {label}",
                        extra={"label": label, "code": e.code.value, "error": e.message},
                    )
                    continue

                self._embeddings[label] = result.embedding
                logger.debug(
                    f"Got embedding for label: {label}",
                    extra={"label": label, "dimensions": result.dimensions},
                )

            track_label_cache(
                hits=len(labels) - len(missing),
                misses=len(missing) - failures,
                failures=failures,
            )

            return {
                label: self._embeddings[label]
                for label in labels
                if label in self._embeddings
            }
