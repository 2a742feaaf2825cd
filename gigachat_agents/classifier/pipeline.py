"""Embedding classifier agent."""

from gigachat_agents.agents.base import Agent
from gigachat_agents.agents.models import Event, Outcome, SkipReason
from gigachat_agents.agents.options import ClassifierOptions
from gigachat_agents.auth.service import GigaChatTokenProvider, TokenProvider
from gigachat_agents.classifier.cache import LabelEmbeddingCache
from gigachat_agents.classifier.scoring import classify
from gigachat_agents.classifier.similarity import vector_norm
from gigachat_agents.config import GigaChatSettings
from gigachat_agents.embeddings.service import EmbeddingService, GigaChatEmbeddingService
from gigachat_agents.exceptions import AuthenticationError, EmbeddingError
from gigachat_agents.logging_config import get_logger
from gigachat_agents.observability.metrics import track_labels_selected
from gigachat_agents.templating import EventTemplate

logger = get_logger(__name__)


class EmbeddingClassifierAgent(Agent):
    """Classifies event text against configured labels by embedding similarity.

    For each event the text template is rendered, label embeddings are
    resolved through the cache, the text is embedded, and every label is
    scored by cosine similarity. The emitted event is the original payload
    plus ``labels`` (selected, in configured order) and ``similarities``
    (every label that could be scored).

    Usage:
        agent = EmbeddingClassifierAgent(ClassifierOptions.build(
            credentials=key, labels=["sports", "politics"],
        ))
        emitted = await agent.receive([Event(payload={"title": "..."})])
    """

    def __init__(
        self,
        options: ClassifierOptions,
        embedding_service: EmbeddingService | None = None,
        settings: GigaChatSettings | None = None,
        cache: LabelEmbeddingCache | None = None,
        name: str = "embedding_classifier",
    ) -> None:
        """Initialize the classifier.

        Args:
            options: Validated classifier options.
            embedding_service: Embedding backend. Built from options if not given.
            settings: GigaChat connection configuration.
            cache: Label embedding cache. A new empty one if not given.
            name: Agent name for logs and metrics.
        """
        super().__init__(name, options.expected_receive_period_in_days)
        self._options = options
        self._text_template = EventTemplate(options.text)

        self._token_provider: TokenProvider | None = None
        if embedding_service is None:
            self._token_provider = GigaChatTokenProvider(
                options.credentials, options.scope, settings=settings
            )
            embedding_service = GigaChatEmbeddingService(
                self._token_provider, model=options.model, settings=settings
            )
            self._owns_service = True
        else:
            self._owns_service = False

        self._embedding_service = embedding_service
        self._cache = cache if cache is not None else LabelEmbeddingCache(embedding_service)

    @property
    def options(self) -> ClassifierOptions:
        """Classifier options."""
        return self._options

    @property
    def cache(self) -> LabelEmbeddingCache:
        """Label embedding cache owned by this classifier."""
        return self._cache

    async def process(self, event: Event) -> Outcome:
        """Classify one event."""
        text = self._text_template.render(event.payload)
        if not text.strip():
            logger.debug("Rendered text is empty, skipping", extra={"event_id": event.id})
            return Outcome.skipped(SkipReason.EMPTY_TEXT)

        label_embeddings = await self._cache.resolve(self._options.labels)

        logger.info(
            f"Requesting embedding for text: {text[:50]}",
            extra={"event_id": event.id},
        )
        try:
            text_result = await self._embedding_service.embed(text)
        except AuthenticationError as e:
            logger.error(
                f"Failed to authenticate for text embedding: {e.message}",
                extra={"event_id": event.id, "code": e.code.value},
            )
            return Outcome.skipped(SkipReason.AUTHENTICATION_FAILED, e.message)
        except EmbeddingError as e:
            logger.error(
                f"Failed to get embedding for text: {e.message}",
                extra={"event_id": event.id, "code": e.code.value},
            )
            return Outcome.skipped(SkipReason.EMBEDDING_FAILED, e.message)

        if vector_norm(text_result.embedding) == 0.0:
            logger.error("Text embedding has zero norm", extra={"event_id": event.id})
            return Outcome.skipped(SkipReason.INVALID_EMBEDDING, "zero-norm text embedding")

        result = classify(
            text_result.embedding,
            label_embeddings,
            self._options.min_similarity,
        )

        if result.failed_labels:
            logger.warning(
                "Some labels could not be scored",
                extra={"event_id": event.id, "labels": result.failed_labels},
            )
        logger.info(
            f"Selected labels with similarity >= {self._options.min_similarity}: "
            f"{result.labels}",
            extra={"event_id": event.id, "similarities": result.similarities},
        )
        track_labels_selected(len(result.labels))

        return Outcome.emitted(
            Event(
                payload={
                    **event.payload,
                    "labels": result.labels,
                    "similarities": result.similarities,
                }
            )
        )

    async def close(self) -> None:
        """Close the embedding service and token provider if we built them."""
        if self._owns_service:
            await self._embedding_service.close()
            if self._token_provider is not None:
                await self._token_provider.close()
