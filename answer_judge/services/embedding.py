from __future__ import annotations

import logging

import litellm

from answer_judge.config.settings import get_settings
from answer_judge.errors import TransportError

logger = logging.getLogger(__name__)


async def generate_embeddings(
    texts: list[str],
    *,
    model: str | None = None,
    dimensions: int | None = None,
    batch_size: int | None = None,
    api_key: str | None = None,
    timeout: float | None = None,
) -> list[list[float]]:
    """Batch-embed texts using a configurable embedding model.

    Texts are processed in batches of ``batch_size`` (default from
    ``EMBEDDING_BATCH_SIZE`` setting) to stay within provider rate / payload
    limits. Each provider call is single-shot and bounded by ``timeout``.

    Args:
        texts: The texts to embed.
        model: Embedding model identifier.  Falls back to
            ``EMBEDDING_MODEL`` from settings when *None*.
        dimensions: Output vector dimensionality.  Falls back to
            ``EMBEDDING_DIMENSIONS`` from settings when *None*.
        batch_size: Number of texts per API call.  Falls back to
            ``EMBEDDING_BATCH_SIZE`` from settings when *None*.
        api_key: Provider credential.  Falls back to ``OPENAI_API_KEY``.
        timeout: Seconds before a call is abandoned.  Falls back to
            ``EMBEDDING_TIMEOUT``.

    Returns:
        A list of embedding vectors (each a ``list[float]``), one per input
        text, preserving input order.

    Raises:
        TransportError: On any litellm / provider API failure.
    """
    if not texts:
        return []

    settings = get_settings()
    model = model or settings.EMBEDDING_MODEL
    dimensions = dimensions or settings.EMBEDDING_DIMENSIONS
    batch_size = batch_size or settings.EMBEDDING_BATCH_SIZE
    api_key = api_key or settings.OPENAI_API_KEY or None
    timeout = timeout or settings.EMBEDDING_TIMEOUT

    embeddings: list[list[float]] = []
    total_batches = (len(texts) + batch_size - 1) // batch_size

    for batch_idx in range(total_batches):
        start = batch_idx * batch_size
        end = start + batch_size
        batch = texts[start:end]

        logger.debug(
            "Embedding batch %d/%d (%d texts)",
            batch_idx + 1,
            total_batches,
            len(batch),
        )

        try:
            response = await litellm.aembedding(
                model=model,
                input=batch,
                dimensions=dimensions,
                api_key=api_key,
                timeout=timeout,
            )
        except Exception as exc:
            raise TransportError(
                f"Embedding batch {batch_idx + 1}/{total_batches} failed: {exc}"
            ) from exc

        # litellm returns data sorted by index; sort explicitly to be safe.
        batch_embeddings = sorted(response.data, key=lambda d: d["index"])
        embeddings.extend(item["embedding"] for item in batch_embeddings)

    return embeddings


async def embed_text(
    text: str,
    *,
    model: str | None = None,
    dimensions: int | None = None,
    api_key: str | None = None,
) -> list[float]:
    """Embed a single text string.

    Args:
        text: The text to embed.
        model: Embedding model identifier (falls back to settings).
        dimensions: Output vector dimensionality (falls back to settings).
        api_key: Provider credential (falls back to settings).

    Returns:
        A single embedding vector as ``list[float]``.

    Raises:
        TransportError: On any litellm / provider API failure.
    """
    vectors = await generate_embeddings(
        [text], model=model, dimensions=dimensions, batch_size=1, api_key=api_key
    )
    return vectors[0]
