from __future__ import annotations

from typing import List, Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Dot product over the product of magnitudes. 0.0 when either vector has
    zero magnitude.
    """
    v1 = np.asarray(a, dtype=np.float64)
    v2 = np.asarray(b, dtype=np.float64)
    if v1.shape != v2.shape:
        raise ValueError(f"Vector shapes differ: {v1.shape} vs {v2.shape}")
    norm = np.linalg.norm(v1) * np.linalg.norm(v2)
    if norm == 0.0:
        return 0.0
    return float(np.dot(v1, v2) / norm)


def cosine_scores(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """
    Cosine similarity of query against every row of matrix (N x D), computed
    exactly. Rows with zero magnitude score 0.0.
    """
    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(matrix, dtype=np.float64)
    if m.size == 0:
        return np.zeros(len(m), dtype=np.float64)

    q_norm = np.linalg.norm(q)
    row_norms = np.linalg.norm(m, axis=1)
    denom = row_norms * q_norm
    dots = m @ q
    scores = np.zeros(len(m), dtype=np.float64)
    nonzero = denom != 0.0
    scores[nonzero] = dots[nonzero] / denom[nonzero]
    return scores


def top_k_indices(scores: Sequence[float], k: int) -> List[int]:
    """
    Indices of the k highest scores, descending. Equal scores keep their
    original order.
    """
    if k <= 0:
        return []
    order = np.argsort(-np.asarray(scores, dtype=np.float64), kind="stable")
    return [int(i) for i in order[:k]]
