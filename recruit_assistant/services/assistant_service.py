import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple

from openai import AsyncOpenAI, OpenAIError

from recruit_assistant.config import config
from recruit_assistant.errors import ConfigurationError, UpstreamFailure

logger = logging.getLogger(__name__)

ASSISTANT_INSTRUCTIONS = """You are the Missouri State Highway Patrol Recruiting Assistant. Tone: warm, concise, plain English.

CRITICAL INSTRUCTIONS:
- Answer questions in 2-5 short sentences using ONLY information from the files you have access to
- When asked about salary in ANY way (pay, money, earn, compensation, wages, etc.), you MUST use the EXACT numbers: Starting pay is $66,432, which increases to $73,824 upon graduation from the academy.
- When asked about "troop locations" or "where can I work" or "locations" or "posts", provide specific troop headquarters and coverage areas if available in your documents.
- When asked about qualifications, requirements, or eligibility, explain the minimum qualifications clearly from your documents.
- When asked about the hiring process, application steps, or requirements, explain the process clearly from your documents.
- NEVER use numbered lists or bullet points. Write in natural paragraphs with line breaks between thoughts.
- NEVER include source citations, file names, or document references in your responses
- Break longer responses into 2-3 short paragraphs with blank lines between them
- If you're not certain about specific information, say "For specific details about this, please complete the contact form at the bottom of this page and a recruiter can provide more information." and include [SCROLL_TO_FORM]
- DO NOT automatically mention the contact form unless: (1) you don't know the answer, (2) the user asks about applying, contacting someone, or next steps, (3) the user asks for specific location details not in your documents

When the user asks about applying, contacting a recruiter, or next steps, tell them: "Please complete the contact form at the bottom of this page and a recruiter will reach out to you." and include this exact tag: [SCROLL_TO_FORM]"""

# Run statuses that mean "keep polling"; anything else is final
PENDING_RUN_STATUSES = {"queued", "in_progress", "cancelling"}


@dataclass
class AssistantReply:
    text: str
    thread_id: str


class AssistantService:
    """Thin wrapper over the OpenAI Assistants API (threads + runs)."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, api_key: Optional[str] = None,
                 model: str = None, version: str = None, assistant_id: Optional[str] = None,
                 vector_store_id: Optional[str] = None, run_timeout: float = None,
                 poll_interval: float = None, max_poll_interval: float = None,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        self._client = client
        self.api_key = api_key
        self.model = model or config.ASSISTANT_MODEL
        self.version = version or config.ASSISTANT_VERSION
        self.preset_assistant_id = assistant_id
        self.vector_store_id = vector_store_id
        self.run_timeout = run_timeout if run_timeout is not None else config.RUN_TIMEOUT_SECONDS
        self.poll_interval = poll_interval if poll_interval is not None else config.RUN_POLL_INTERVAL_SECONDS
        self.max_poll_interval = (
            max_poll_interval if max_poll_interval is not None else config.RUN_POLL_MAX_INTERVAL_SECONDS
        )
        self._sleep = sleep
        self._assistant: Optional[Tuple[str, str]] = None  # (version, assistant_id)
        self._assistant_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, cfg) -> "AssistantService":
        return cls(
            api_key=cfg.OPENAI_API_KEY,
            model=cfg.ASSISTANT_MODEL,
            version=cfg.ASSISTANT_VERSION,
            assistant_id=cfg.ASSISTANT_ID,
            vector_store_id=cfg.VECTOR_STORE_ID,
            run_timeout=cfg.RUN_TIMEOUT_SECONDS,
            poll_interval=cfg.RUN_POLL_INTERVAL_SECONDS,
            max_poll_interval=cfg.RUN_POLL_MAX_INTERVAL_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise ConfigurationError("API key not configured")
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    def _cached_assistant_id(self) -> Optional[str]:
        if self._assistant is not None and self._assistant[0] == self.version:
            return self._assistant[1]
        return None

    async def get_assistant_id(self) -> str:
        """Return the assistant for the current version, creating it at most once."""
        assistant_id = self._cached_assistant_id()
        if assistant_id:
            return assistant_id

        async with self._assistant_lock:
            assistant_id = self._cached_assistant_id()
            if assistant_id:
                return assistant_id

            if self.preset_assistant_id:
                assistant_id = self.preset_assistant_id
            else:
                assistant_id = await self._create_assistant()
            self._assistant = (self.version, assistant_id)
            return assistant_id

    async def _create_assistant(self) -> str:
        kwargs = {
            "name": config.ASSISTANT_NAME,
            "instructions": ASSISTANT_INSTRUCTIONS,
            "model": self.model,
            "tools": [{"type": "file_search"}],
            "metadata": {"version": self.version},
        }
        if self.vector_store_id:
            kwargs["tool_resources"] = {"file_search": {"vector_store_ids": [self.vector_store_id]}}

        try:
            assistant = await self.client.beta.assistants.create(**kwargs)
        except OpenAIError as e:
            logger.error("Error creating assistant: %s", e)
            raise
        logger.info("Created assistant %s (version %s)", assistant.id, self.version)
        return assistant.id

    async def answer(self, message: str, thread_id: Optional[str] = None) -> AssistantReply:
        """Post ``message`` to the thread (new one if none) and wait for the reply."""
        assistant_id = await self.get_assistant_id()

        if not thread_id:
            thread = await self.client.beta.threads.create()
            thread_id = thread.id

        await self.client.beta.threads.messages.create(thread_id, role="user", content=message)
        run = await self.client.beta.threads.runs.create(thread_id, assistant_id=assistant_id)

        start_time = time.time()
        try:
            run = await asyncio.wait_for(self._poll_run(thread_id, run), timeout=self.run_timeout)
        except asyncio.TimeoutError:
            await self._cancel_run(thread_id, run.id)
            raise UpstreamFailure(f"Run timed out after {self.run_timeout:g}s")

        elapsed = (time.time() - start_time) * 1000
        logger.info("Run %s finished with status %s in %.2fms", run.id, run.status, elapsed)

        if run.status != "completed":
            logger.error("Run failed with status: %s", run.status)
            raise UpstreamFailure(f"Run status: {run.status}")

        messages = await self.client.beta.threads.messages.list(thread_id, order="desc", limit=1)
        return AssistantReply(text=self._message_text(messages.data[0]), thread_id=thread_id)

    async def _poll_run(self, thread_id: str, run):
        interval = self.poll_interval
        while run.status in PENDING_RUN_STATUSES:
            await self._sleep(interval)
            interval = min(interval * 2, self.max_poll_interval)
            run = await self.client.beta.threads.runs.retrieve(run.id, thread_id=thread_id)
        return run

    async def _cancel_run(self, thread_id: str, run_id: str) -> None:
        try:
            await self.client.beta.threads.runs.cancel(run_id, thread_id=thread_id)
        except OpenAIError as e:
            logger.warning("Could not cancel run %s: %s", run_id, e)

    @staticmethod
    def _message_text(message) -> str:
        for block in message.content:
            if getattr(block, "type", None) == "text":
                return block.text.value
        raise UpstreamFailure("Assistant reply contained no text")
