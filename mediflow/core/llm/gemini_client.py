"""
Gemini API Client

Summarization gateway: one prompt in, one text completion out, through
LangChain's Google Generative AI chat model. Any failure (no credentials,
provider error, timeout, empty or unparseable completion) raises
SummarizationError; there is no mock fallback.

Retries are off by default (fail-fast). Set ``GEMINI_MAX_RETRIES`` to let
the underlying client retry transient provider errors.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from enum import Enum
import asyncio
import os
import time

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from mediflow.utils import SummarizationError, get_logger

logger = get_logger(__name__)


class GeminiModel(str, Enum):
    """Gemini models known to work with the handover prompt."""
    FLASH_2_5 = "gemini-2.5-flash"
    FLASH_2_5_LITE = "gemini-2.5-flash-lite"
    PRO_2_5 = "gemini-2.5-pro"
    FLASH_2_0 = "gemini-2.0-flash"


@dataclass
class GeminiConfig:
    """Configuration for Gemini client."""
    api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    )
    model: str = field(default_factory=lambda: os.getenv("GEMINI_MODEL", GeminiModel.FLASH_2_5.value))
    temperature: float = 0.3
    max_output_tokens: int = 4096
    top_p: float = 0.8
    top_k: int = 40

    request_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("GEMINI_TIMEOUT_SECONDS", "30"))
    )
    max_retries: int = field(default_factory=lambda: int(os.getenv("GEMINI_MAX_RETRIES", "0")))

    @property
    def model_name(self) -> str:
        """Resolve the model whether given as a GeminiModel or a plain string."""
        m = self.model
        return m.value if hasattr(m, "value") else str(m)


@dataclass
class GeminiResponse:
    """Structured response from Gemini."""
    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "model": self.model,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "latency_ms": round(self.latency_ms, 2),
        }


def extract_text(response: Any) -> str:
    """
    Pull the single completion text out of a chat model response.

    ``content`` is either a string or a list of parts (strings or
    ``{"type": "text", "text": ...}`` dicts); text parts are concatenated.

    Raises:
        SummarizationError: no content, or no non-blank text in it
    """
    content = getattr(response, "content", None)
    if isinstance(content, str):
        text = content
    elif isinstance(content, list):
        pieces = []
        for part in content:
            if isinstance(part, str):
                pieces.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                pieces.append(part["text"])
        text = "".join(pieces)
    else:
        raise SummarizationError(
            f"Unparseable completion: content of type {type(content).__name__}"
        )

    if not text.strip():
        raise SummarizationError("Completion contained no text")
    return text


class GeminiClient:
    """
    Client for Google Gemini.

    ``llm`` can be injected (any object exposing ``invoke``/``ainvoke``);
    otherwise a ChatGoogleGenerativeAI model is built from the config.
    """

    def __init__(self, config: Optional[GeminiConfig] = None, llm: Any = None):
        self.config = config or GeminiConfig()
        self._llm = llm
        self._request_count = 0
        self._last_request_time: Optional[float] = None

        if self._llm is None:
            self._initialize()

    def _initialize(self) -> None:
        if not self.config.api_key:
            logger.warning("No Gemini API key provided - summarization disabled")
            return

        self._llm = ChatGoogleGenerativeAI(
            model=self.config.model_name,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_output_tokens,
            top_p=self.config.top_p,
            top_k=self.config.top_k,
            timeout=self.config.request_timeout_seconds,
            max_retries=self.config.max_retries,
            google_api_key=self.config.api_key,
        )
        logger.info(f"Gemini client initialized with model: {self.config.model_name}")

    @property
    def is_available(self) -> bool:
        return self._llm is not None

    def _require_llm(self) -> Any:
        if self._llm is None:
            raise SummarizationError(
                "Gemini client is not configured (missing API key)",
                model=self.config.model_name,
            )
        return self._llm

    def _to_response(self, raw: Any, started: float) -> GeminiResponse:
        text = extract_text(raw)
        usage = getattr(raw, "usage_metadata", None) or {}
        self._request_count += 1
        self._last_request_time = time.time()
        return GeminiResponse(
            text=text,
            model=self.config.model_name,
            prompt_tokens=usage.get("input_tokens", 0),
            completion_tokens=usage.get("output_tokens", 0),
            latency_ms=(time.perf_counter() - started) * 1000,
        )

    def generate(self, prompt: str) -> GeminiResponse:
        """
        Blocking single completion.

        Args:
            prompt: The complete prompt, sent as the only message

        Returns:
            GeminiResponse with the completion text
        """
        llm = self._require_llm()
        started = time.perf_counter()
        try:
            raw = llm.invoke([HumanMessage(content=prompt)])
        except Exception as e:
            logger.error(f"Gemini generation failed: {e}")
            raise SummarizationError(str(e), model=self.config.model_name) from e

        response = self._to_response(raw, started)
        logger.info(
            f"Gemini completion: prompt={len(prompt)} chars, "
            f"response={len(response.text)} chars, {response.latency_ms:.0f} ms"
        )
        return response

    async def generate_async(self, prompt: str) -> GeminiResponse:
        """
        Async single completion bounded by ``request_timeout_seconds``.

        Cancelling the awaiting task cancels the in-flight provider call.
        """
        llm = self._require_llm()
        started = time.perf_counter()
        try:
            raw = await asyncio.wait_for(
                llm.ainvoke([HumanMessage(content=prompt)]),
                timeout=self.config.request_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                f"Gemini generation timed out after {self.config.request_timeout_seconds}s"
            )
            raise SummarizationError(
                "Gemini call timed out",
                model=self.config.model_name,
                details={"timeout_seconds": self.config.request_timeout_seconds},
            ) from e
        except Exception as e:
            logger.error(f"Async Gemini generation failed: {e}")
            raise SummarizationError(str(e), model=self.config.model_name) from e

        response = self._to_response(raw, started)
        logger.info(
            f"Gemini completion: prompt={len(prompt)} chars, "
            f"response={len(response.text)} chars, {response.latency_ms:.0f} ms"
        )
        return response

    async def generate_text(self, prompt: str) -> str:
        """Gateway contract used by the handover service: prompt in, text out."""
        return (await self.generate_async(prompt)).text

    def get_stats(self) -> Dict[str, Any]:
        return {
            "is_available": self.is_available,
            "model": self.config.model_name,
            "request_count": self._request_count,
            "last_request": self._last_request_time,
        }
