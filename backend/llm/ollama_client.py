"""
Explanation Client

Sends a chart prompt and its dataset context to an Ollama chat model and
returns the explanation text.
"""

import asyncio
from typing import Any, Optional

import httpx

from config import get_settings
from core.logging_config import llm_logger as logger


class LLMUnavailableError(RuntimeError):
    """Raised when no explanation could be obtained."""


RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class OllamaClient:
    """
    Chat client for a local Ollama server.

    A single pooled httpx client serves every request. Timeouts, network
    errors and retryable statuses are retried with exponential backoff;
    anything else fails fast.
    """

    def __init__(self):
        self.settings = get_settings()
        self._http: Optional[httpx.AsyncClient] = None

    @property
    def model(self) -> str:
        return self.settings.ollama.model

    async def _session(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            ollama = self.settings.ollama
            self._http = httpx.AsyncClient(
                base_url=ollama.base_url,
                timeout=httpx.Timeout(ollama.timeout),
            )
        return self._http

    async def close(self) -> None:
        if self._http is not None and not self._http.is_closed:
            await self._http.aclose()
        self._http = None

    @staticmethod
    def build_messages(
        prompt: str,
        context: Optional[str] = None,
        system: Optional[str] = None,
    ) -> list[dict[str, str]]:
        """Chat messages: optional system turn, then context and prompt as one user turn."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})

        content = f"{context}\n\n{prompt}" if context else prompt
        messages.append({"role": "user", "content": content})
        return messages

    @staticmethod
    def _content(data: dict[str, Any]) -> str:
        text = (data.get("message") or {}).get("content", "")
        if not text.strip():
            raise LLMUnavailableError("Ollama returned an empty explanation")
        return text

    async def explain(
        self,
        prompt: str,
        context: Optional[str] = None,
        system: Optional[str] = None,
    ) -> str:
        """
        Ask the model to explain a chart.

        Args:
            prompt: Chart-specific question
            context: Dataset and chart data the answer should rely on
            system: Optional system instructions

        Raises:
            LLMUnavailableError: when no attempt produced an explanation
        """
        ollama = self.settings.ollama
        payload = {
            "model": self.model,
            "messages": self.build_messages(prompt, context, system),
            "stream": False,
            "options": {
                "temperature": ollama.temperature,
                "num_predict": ollama.max_tokens,
            },
        }

        http = await self._session()
        failure: Optional[Exception] = None

        for attempt in range(1, ollama.max_retries + 1):
            try:
                response = await http.post("/api/chat", json=payload)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as e:
                failure = e
                if e.response.status_code not in RETRYABLE_STATUS:
                    break
            except (httpx.TimeoutException, httpx.NetworkError) as e:
                failure = e
            except (httpx.HTTPError, ValueError) as e:
                failure = e
                break
            else:
                return self._content(data)

            logger.warning(f"Explanation attempt {attempt}/{ollama.max_retries} failed: {failure!r}")
            if attempt < ollama.max_retries:
                await asyncio.sleep(ollama.retry_backoff * 2 ** (attempt - 1))

        raise LLMUnavailableError(f"Ollama request failed: {failure}")

    async def status(self) -> dict[str, Any]:
        """Whether the server answers and the configured model is installed."""
        try:
            http = await self._session()
            response = await http.get("/api/tags")
            response.raise_for_status()
            installed = [m.get("name") for m in response.json().get("models", [])]
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Ollama status check failed: {e!r}")
            return {"reachable": False, "model": self.model, "model_installed": False}

        return {
            "reachable": True,
            "model": self.model,
            "model_installed": self.model in installed,
        }


# Global instance
ollama_client = OllamaClient()
