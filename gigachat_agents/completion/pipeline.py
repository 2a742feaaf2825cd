"""Completion agent: forwards rendered prompts to GigaChat."""

from gigachat_agents.agents.base import Agent
from gigachat_agents.agents.models import Event, Outcome, SkipReason
from gigachat_agents.agents.options import CompletionOptions
from gigachat_agents.auth.service import GigaChatTokenProvider, TokenProvider
from gigachat_agents.config import GigaChatSettings
from gigachat_agents.exceptions import AuthenticationError, LLMError
from gigachat_agents.llm.client import GigaChatClient, LLMClient
from gigachat_agents.logging_config import get_logger
from gigachat_agents.templating import EventTemplate

logger = get_logger(__name__)


class CompletionAgent(Agent):
    """Attaches a chat completion to each incoming event.

    The emitted event is the original payload plus ``completion`` with the
    response text, token usage and model name.
    """

    def __init__(
        self,
        options: CompletionOptions,
        llm_client: LLMClient | None = None,
        settings: GigaChatSettings | None = None,
        name: str = "completion",
    ) -> None:
        """Initialize the completion agent.

        Args:
            options: Validated completion options.
            llm_client: Chat backend. Built from options if not given.
            settings: GigaChat connection configuration.
            name: Agent name for logs and metrics.
        """
        super().__init__(name, options.expected_receive_period_in_days)
        self._options = options
        self._system_template = EventTemplate(options.system_prompt)
        self._user_template = EventTemplate(options.user_prompt)

        self._token_provider: TokenProvider | None = None
        if llm_client is None:
            self._token_provider = GigaChatTokenProvider(
                options.credentials, options.scope, settings=settings
            )
            llm_client = GigaChatClient(
                self._token_provider,
                model=options.model,
                temperature=options.temperature,
                max_tokens=options.max_tokens,
                settings=settings,
            )
            self._owns_client = True
        else:
            self._owns_client = False

        self._llm_client = llm_client

    @property
    def options(self) -> CompletionOptions:
        """Completion options."""
        return self._options

    async def process(self, event: Event) -> Outcome:
        """Request a completion for one event."""
        system_prompt = self._system_template.render(event.payload)
        user_prompt = self._user_template.render(event.payload)

        try:
            result = await self._llm_client.generate_text(
                prompt=user_prompt,
                system_prompt=system_prompt,
                temperature=self._options.temperature,
                max_tokens=self._options.max_tokens,
            )
        except AuthenticationError as e:
            logger.error(
                f"Failed to authenticate for completion: {e.message}",
                extra={"event_id": event.id, "code": e.code.value},
            )
            return Outcome.skipped(SkipReason.AUTHENTICATION_FAILED, e.message)
        except LLMError as e:
            logger.error(
                f"Failed to get completion from GigaChat: {e.message}",
                extra={"event_id": event.id, "code": e.code.value},
            )
            return Outcome.skipped(SkipReason.COMPLETION_FAILED, e.message)

        logger.info(
            "GigaChat completion succeeded",
            extra={
                "event_id": event.id,
                "model": result.model,
                "total_tokens": result.total_tokens,
            },
        )
        return Outcome.emitted(
            Event(payload={**event.payload, "completion": result.to_completion()})
        )

    async def close(self) -> None:
        """Close the LLM client and token provider if we built them."""
        if self._owns_client:
            await self._llm_client.close()
            if self._token_provider is not None:
                await self._token_provider.close()
