from typing import List, Dict, Any, Optional, Union, Sequence
from dataclasses import dataclass
import asyncio
import json
import logging

import aiohttp

from mindyamsanzi.core.config import Settings
from mindyamsanzi.core.exceptions import ConfigError, GatewayError, GatewayTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayConfig:
    api_key: str
    base_url: str
    model: str
    temperature: float = 0.7
    timeout_seconds: float = 15.0
    malformed_body_limit: int = 2000

    @classmethod
    def from_settings(cls, settings: Settings) -> "GatewayConfig":
        return cls(
            api_key=settings.OPENROUTER_API_KEY,
            base_url=settings.OPENROUTER_BASE_URL,
            model=settings.AI_MODEL,
            temperature=settings.AI_TEMPERATURE,
            timeout_seconds=settings.AI_TIMEOUT_SECONDS,
            malformed_body_limit=settings.MALFORMED_BODY_LIMIT,
        )

    @property
    def completions_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"


@dataclass(frozen=True)
class CompletionSuccess:
    text: str


@dataclass(frozen=True)
class MalformedBody:
    raw: str

    @property
    def text(self) -> str:
        return self.raw


Completion = Union[CompletionSuccess, MalformedBody]


def parse_completion(body: str, limit: int = 2000) -> Completion:
    """Read an upstream body without trusting its shape"""
    try:
        data = json.loads(body)
    except ValueError:
        return MalformedBody(raw=body[:limit])

    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                return CompletionSuccess(text=message["content"])

        # some providers answer with a flat {"message": "..."}
        if isinstance(data.get("message"), str):
            return CompletionSuccess(text=data["message"])

    return MalformedBody(raw=json.dumps(data)[:limit])


class GatewayCall:
    """One outbound completion request, with a deadline and a cancel operation"""

    def __init__(self, coro, timeout_seconds: float):
        loop = asyncio.get_running_loop()
        self.timeout_seconds = timeout_seconds
        self.deadline = loop.time() + timeout_seconds
        self._loop = loop
        self._task = asyncio.ensure_future(coro)

    @property
    def done(self) -> bool:
        return self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._task.cancelled()

    def remaining(self) -> float:
        return max(0.0, self.deadline - self._loop.time())

    def cancel(self) -> None:
        if not self._task.done():
            self._task.cancel()

    async def result(self) -> Completion:
        try:
            # wait_for cancels the task and waits for it to unwind on timeout
            return await asyncio.wait_for(self._task, timeout=self.remaining())
        except asyncio.TimeoutError:
            self.cancel()
            logger.error(f"AI provider request timed out after {self.timeout_seconds}s")
            raise GatewayTimeout("AI provider timeout")
        except asyncio.CancelledError:
            self.cancel()
            raise


class AIGateway:
    """Client for the remote chat-completion service"""

    def __init__(self, config: GatewayConfig):
        if not config.api_key:
            raise ConfigError("Missing OpenRouter API key")
        self.config = config

    def _build_payload(
        self,
        system_prompt: str,
        turns: Sequence[Dict[str, str]],
        max_tokens: Optional[int]
    ) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": turn["role"], "content": turn["content"]} for turn in turns)

        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
        }
        if max_tokens:
            payload["max_tokens"] = max_tokens
        return payload

    async def _post(self, payload: Dict[str, Any]) -> Completion:
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.config.completions_url, json=payload, headers=headers) as response:
                    if response.status < 200 or response.status >= 300:
                        error_text = await response.text()
                        logger.error(f"AI provider error {response.status}: {error_text[:500]}")
                        raise GatewayError(f"AI provider error {response.status}", status=response.status)

                    body = await response.text()
        except aiohttp.ClientError as e:
            logger.error(f"AI provider request failed: {e}")
            raise GatewayError("AI provider fetch failed")

        return parse_completion(body, self.config.malformed_body_limit)

    def start(
        self,
        system_prompt: str,
        turns: Sequence[Dict[str, str]],
        max_tokens: Optional[int] = None
    ) -> GatewayCall:
        """Send the request and hand back the pending call"""
        payload = self._build_payload(system_prompt, turns, max_tokens)
        return GatewayCall(self._post(payload), self.config.timeout_seconds)

    async def complete(
        self,
        system_prompt: str,
        turns: Sequence[Dict[str, str]],
        max_tokens: Optional[int] = None
    ) -> str:
        """Return one assistant reply for the system prompt and conversation"""
        call = self.start(system_prompt, turns, max_tokens)
        completion = await call.result()

        if isinstance(completion, MalformedBody):
            logger.warning("AI provider returned an unexpected body; using raw text")
        return completion.text
