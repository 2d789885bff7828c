"""
Text preprocessing and the deterministic hashed embedding.

Both functions are pure: the same input string always yields the same
output, in every process, which is what makes the fallback embedding usable
in tests without network access.
"""

from __future__ import annotations

import re
from typing import List

import numpy as np

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def clean_text(text: str, max_chars: int = 1000) -> str:
    """
    Strip punctuation, collapse whitespace, trim and truncate.
    """
    cleaned = _NON_WORD.sub(" ", text or "")
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return cleaned[:max_chars]


def token_bucket(token: str, dimension: int) -> int:
    """
    Map a token to a bucket in ``[0, dimension)``.

    Uses a 32-bit signed rolling hash (h = h * 31 + ord(ch)) rather than
    ``hash()``, which is salted per process.
    """
    h = 0
    for ch in token:
        h = ((h << 5) - h + ord(ch)) & _INT32_MASK
    if h & _INT32_SIGN:
        h -= 1 << 32
    return abs(h) % dimension


def hashed_embedding(text: str, dimension: int = 768) -> List[float]:
    """
    Deterministic pseudo-embedding used when no provider is available.

    Every whitespace token adds ``1 / (position + 1)`` to its bucket, so
    earlier tokens weigh more. The result is L2-normalized; an input with no
    tokens yields the all-zero vector.
    """
    if dimension <= 0:
        raise ValueError("dimension must be positive")

    vec = np.zeros(dimension, dtype=np.float64)
    for position, token in enumerate(text.lower().split()):
        vec[token_bucket(token, dimension)] += 1.0 / (position + 1)

    norm = float(np.linalg.norm(vec))
    if norm == 0.0:
        return vec.tolist()

    return (vec / norm).tolist()
