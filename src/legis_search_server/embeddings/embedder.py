"""
Embedding Client

This module turns bill text into fixed-length vectors. It is responsible for:

- Cleaning and bounding the text submitted to the provider
- Calling the Gemini ``embedContent`` endpoint when an API key is configured
- Falling back to a deterministic hashed embedding whenever the provider is
  missing, slow, failing, or returns something malformed
- Sequential, throttled batch embedding of bill documents

``Embedder.embed`` never raises: provider failures are recovered here and the
caller always gets *some* vector. No caching happens at this layer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

import httpx

from ..config import settings
from .models import BillDocument, BillEmbedding
from .text import clean_text, hashed_embedding

logger = logging.getLogger("legis.embedder")


class EmbeddingError(RuntimeError):
    """Raised when the provider response cannot be turned into a vector."""


class Embedder:
    """
    Asynchronous embedding generator with a deterministic offline fallback.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        dimension: Optional[int] = None,
        max_chars: Optional[int] = None,
        timeout: Optional[float] = None,
        throttle_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize an Embedder.

        Parameters
        ----------
        api_key : Optional[str]
            Provider key. Defaults to settings.gemini_api_key; when neither is
            set every call uses the hashed fallback.

        model : Optional[str]
            Provider model name. Defaults to settings.embedding_model.

        base_url : Optional[str]
            Provider API root. Defaults to settings.embedding_base_url.

        dimension : Optional[int]
            Length of fallback vectors. Defaults to settings.embedding_dimension.
            Must be positive.

        max_chars : Optional[int]
            Cleaned text is truncated to this many characters.

        timeout : Optional[float]
            Per-request HTTP timeout. A timeout counts as provider unavailable.

        throttle_seconds : Optional[float]
            Delay between consecutive calls in ``embed_batch``.

        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport, used by tests to stub the provider.
        """
        if api_key is None and settings.gemini_api_key is not None:
            api_key = settings.gemini_api_key.get_secret_value()

        self.api_key = api_key or None
        self.model = model or settings.embedding_model
        self.base_url = str(base_url or settings.embedding_base_url).rstrip("/")
        self.dimension = (
            dimension if dimension is not None else settings.embedding_dimension
        )
        self.max_chars = (
            max_chars if max_chars is not None else settings.embedding_max_chars
        )
        if self.dimension < 1:
            raise ValueError("dimension must be positive")
        if self.max_chars < 1:
            raise ValueError("max_chars must be positive")

        self.timeout = timeout if timeout is not None else settings.embedding_timeout
        self.throttle_seconds = (
            throttle_seconds
            if throttle_seconds is not None
            else settings.embedding_throttle_seconds
        )
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def uses_provider(self) -> bool:
        return bool(self.api_key)

    def fallback_embed(self, text: str) -> List[float]:
        """
        Deterministic embedding of the cleaned text.
        """
        return hashed_embedding(clean_text(text, self.max_chars), self.dimension)

    async def embed(self, text: str) -> List[float]:
        """
        Embed a single text.

        Returns the provider's vector unmodified, or the hashed fallback when
        the provider is not configured or the call fails for any reason.
        """
        cleaned = clean_text(text, self.max_chars)

        if not self.uses_provider:
            return hashed_embedding(cleaned, self.dimension)

        try:
            return await self._embed_remote(cleaned)
        except Exception as exc:
            logger.warning(
                "Embedding provider unavailable (%s), using hashed fallback: %s",
                type(exc).__name__,
                str(exc),
            )
            return hashed_embedding(cleaned, self.dimension)

    async def embed_batch(
        self,
        documents: Sequence[BillDocument],
    ) -> List[BillEmbedding]:
        """
        Embed bill documents one at a time, pausing between calls.

        A failure on a single document is logged and that document is
        skipped; the rest of the batch continues.
        """
        results: List[BillEmbedding] = []
        total = len(documents)

        logger.info("Generating embeddings for %d bills", total)

        for position, doc in enumerate(documents):
            try:
                full_text = doc.full_text
                vector = await self.embed(full_text)
                results.append(
                    BillEmbedding(
                        document=doc,
                        full_text=full_text,
                        embedding=vector,
                    )
                )
            except Exception:
                logger.exception("Failed to embed bill %s, skipping", doc.id)

            if self.throttle_seconds and position < total - 1:
                await asyncio.sleep(self.throttle_seconds)

        logger.info("Generated %d/%d bill embeddings", len(results), total)
        return results

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _embed_remote(self, text: str) -> List[float]:
        url = f"{self.base_url}/models/{self.model}:embedContent"
        payload = {
            "model": f"models/{self.model}",
            "content": {"parts": [{"text": text}]},
        }
        headers = {"x-goog-api-key": self.api_key}

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()

        return self._extract_embedding(response.json())

    @staticmethod
    def _extract_embedding(data: dict) -> List[float]:
        """
        Parse and validate provider output.

        Gemini returns:
            { "embedding": { "values": [...] } }

        Raises
        ------
        EmbeddingError
            If the response has an unexpected structure.
        """
        if not isinstance(data, dict) or "embedding" not in data:
            raise EmbeddingError("Embedding response missing 'embedding' field.")

        record = data["embedding"]
        if not isinstance(record, dict) or "values" not in record:
            raise EmbeddingError("Embedding record missing 'values' field.")

        values = record["values"]
        if not isinstance(values, list) or not values:
            raise EmbeddingError("Embedding 'values' must be a non-empty list.")

        if not all(
            isinstance(x, (float, int)) and not isinstance(x, bool) for x in values
        ):
            raise EmbeddingError("Embedding 'values' must contain only numbers.")

        return [float(x) for x in values]
