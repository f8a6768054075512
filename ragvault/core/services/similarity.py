"""Cosine similarity helpers shared by the vector store and retrieval service."""

from collections.abc import Sequence

import numpy as np


# Full Python float precision: loaded embeddings equal saved ones
VECTOR_DTYPE = np.float64


def as_vector(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=VECTOR_DTYPE)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors, in [-1.0, 1.0].

    Returns 0.0 when either vector is empty, has zero magnitude, or the
    lengths differ.
    """
    va, vb = as_vector(a), as_vector(b)
    if va.size == 0 or va.shape != vb.shape:
        return 0.0
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / norm, -1.0, 1.0))


def cosine_scores(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Score every row of ``matrix`` against ``query``.

    Rows with zero magnitude score 0.0.
    """
    if matrix.size == 0:
        return np.zeros(0, dtype=VECTOR_DTYPE)
    query_norm = float(np.linalg.norm(query))
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * query_norm
    dots = matrix @ query
    scores = np.divide(dots, denom, out=np.zeros_like(dots), where=denom > 0)
    return np.clip(scores, -1.0, 1.0)
