"""Tests for the label embedding cache."""

from collections.abc import Callable

import pytest

from gigachat_agents.classifier.cache import LabelEmbeddingCache

LABELS = ["sports", "politics", "technology", "science", "culture"]


def _vectors() -> dict[str, list[float]]:
    return {label: [float(i + 1), 1.0] for i, label in enumerate(LABELS)}


class TestLabelEmbeddingCache:
    """Tests for LabelEmbeddingCache."""

    @pytest.mark.asyncio
    async def test_fetches_only_missing_labels(self, fake_embeddings: Callable) -> None:
        """Resolving L with S cached issues exactly |L - S| calls."""
        service = fake_embeddings(_vectors())
        cache = LabelEmbeddingCache(
            service,
            initial={"sports": [9.0, 9.0], "science": [8.0, 8.0]},
        )

        result = await cache.resolve(LABELS)

        assert sorted(service.calls) == ["culture", "politics", "technology"]
        assert result["sports"] == [9.0, 9.0]
        assert list(result) == LABELS

    @pytest.mark.asyncio
    async def test_second_resolve_hits_cache(self, fake_embeddings: Callable) -> None:
        """Previously fetched labels are never requested again."""
        service = fake_embeddings(_vectors())
        cache = LabelEmbeddingCache(service)

        await cache.resolve(LABELS)
        await cache.resolve(LABELS)

        assert len(service.calls) == len(LABELS)
        assert len(cache) == len(LABELS)

    @pytest.mark.asyncio
    async def test_failed_label_left_out(self, fake_embeddings: Callable) -> None:
        """A failing label is omitted and retried on the next call."""
        service = fake_embeddings(_vectors(), failing={"politics"})
        cache = LabelEmbeddingCache(service)

        result = await cache.resolve(LABELS)

        assert "politics" not in result
        assert len(result) == 4
        assert "politics" not in cache

        service.failing.clear()
        result = await cache.resolve(LABELS)

        assert "politics" in result
        assert service.calls.count("politics") == 2

    @pytest.mark.asyncio
    async def test_only_requested_labels_returned(self, fake_embeddings: Callable) -> None:
        """Stale entries stay cached but are not returned."""
        service = fake_embeddings(_vectors())
        cache = LabelEmbeddingCache(service, initial={"old": [1.0, 0.0]})

        result = await cache.resolve(["sports"])

        assert list(result) == ["sports"]
        assert "old" in cache

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self, fake_embeddings: Callable) -> None:
        """Snapshot can be modified without touching the cache."""
        service = fake_embeddings(_vectors())
        cache = LabelEmbeddingCache(service)
        await cache.resolve(["sports"])

        snapshot = cache.snapshot()
        snapshot["sports"].append(0.0)
        snapshot["new"] = [1.0]

        assert cache.snapshot() == {"sports": [1.0, 1.0]}
