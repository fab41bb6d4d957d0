import numpy as np
import pytest

from common.errors import CorruptionError
from retrieval.similarity import cosine_scores, cosine_similarity, top_k_indices
from vectorstore.embedding_codec import (
    deserialize_embedding,
    embedding_dimension,
    serialize_embedding,
)


def test_identical_vectors_score_one():
    assert cosine_similarity([0.3, -1.2, 4.0], [0.3, -1.2, 4.0]) == pytest.approx(1.0)


def test_orthogonal_vectors_score_zero():
    assert cosine_similarity([1.0, 0.0], [0.0, 5.0]) == pytest.approx(0.0)


def test_zero_vector_scores_zero():
    assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
    assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0


def test_opposite_vectors_score_minus_one():
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_cosine_scores_matches_pairwise():
    matrix = np.array([[1.0, 0.0], [0.0, 0.0], [1.0, 1.0], [-2.0, 0.0]])
    query = [1.0, 0.0]
    scores = cosine_scores(query, matrix)
    expected = [cosine_similarity(query, row) for row in matrix]
    assert scores.tolist() == pytest.approx(expected)
    assert scores[1] == 0.0


def test_top_k_is_descending_and_stable_on_ties():
    scores = [0.2, 0.9, 0.5, 0.9, 0.1, 0.5]
    assert top_k_indices(scores, 4) == [1, 3, 2, 5]


def test_top_k_returns_min_of_n_and_k():
    assert top_k_indices([0.1, 0.3], 5) == [1, 0]
    assert top_k_indices([], 5) == []


def test_embedding_bytes_are_little_endian_float32():
    blob = serialize_embedding([1.0, -2.5])
    assert len(blob) == 8
    assert blob[:4] == b"\x00\x00\x80\x3f"  # 1.0f little-endian
    assert deserialize_embedding(blob).tolist() == [1.0, -2.5]
    assert embedding_dimension(blob) == 2


def test_truncated_embedding_blob_is_corruption():
    with pytest.raises(CorruptionError):
        deserialize_embedding(b"\x00\x00\x80\x3f\x00")
