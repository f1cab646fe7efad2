import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Optional, Set

from recruit_assistant.errors import ClientError, ConfigurationError
from recruit_assistant.services.analytics_service import AnalyticsService
from recruit_assistant.services.assistant_service import AssistantService
from recruit_assistant.services.response_cache import ResponseCache
from recruit_assistant.services.text_utils import extract_scroll_signal, remove_citations

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    reply: str
    thread_id: str
    scroll_to_form: bool
    cached: bool


class ChatService:
    """Per-request flow: analytics (detached), cache check, assistant call, cache store."""

    def __init__(self, assistant: AssistantService, cache: ResponseCache,
                 analytics: Optional[AnalyticsService] = None,
                 executor: Optional[concurrent.futures.Executor] = None):
        self.assistant = assistant
        self.cache = cache
        self.analytics = analytics
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="analytics"
        )
        self._pending: Set[concurrent.futures.Future] = set()

    async def chat(self, message: Optional[str], thread_id: Optional[str] = None) -> ChatResult:
        if not self.assistant.is_configured:
            logger.error("OPENAI_API_KEY not found")
            raise ConfigurationError("API key not configured")
        if not message or not message.strip():
            raise ClientError("Message is required")

        self.dispatch_analytics(message)

        cached = self.cache.lookup(message)
        if cached is not None:
            logger.info("Cache hit for: %s", message)
            return ChatResult(
                reply=cached.answer_text,
                thread_id=cached.conversation_handle,
                scroll_to_form=cached.scroll_to_form,
                cached=True,
            )

        raw = await self.assistant.answer(message, thread_id)
        reply, scroll_to_form = extract_scroll_signal(remove_citations(raw.text))

        self.cache.insert(self.cache.new_entry(message, reply, raw.thread_id, scroll_to_form))
        return ChatResult(reply=reply, thread_id=raw.thread_id, scroll_to_form=scroll_to_form, cached=False)

    def dispatch_analytics(self, message: str) -> Optional[concurrent.futures.Future]:
        """Record ``message`` on a worker thread. Never raises, never blocks."""
        if self.analytics is None:
            return None
        try:
            future = self._executor.submit(self._record_analytics, message)
        except RuntimeError:
            logger.warning("Analytics executor is shut down, dropping question")
            return None
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)
        return future

    def _record_analytics(self, message: str) -> None:
        try:
            self.analytics.record(message)
        except Exception as e:
            logger.error("Error tracking question: %s", e, exc_info=True)

    def wait_for_analytics(self, timeout: Optional[float] = None) -> None:
        """Block until in-flight analytics writes finish (shutdown and tests)."""
        concurrent.futures.wait(list(self._pending), timeout=timeout)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
