from __future__ import annotations

from typing import Sequence

import numpy as np

from common.errors import CorruptionError

# One byte order for both the write and the read path.
EMBEDDING_DTYPE = np.dtype("<f4")


def serialize_embedding(vector: Sequence[float]) -> bytes:
    return np.asarray(vector, dtype=EMBEDDING_DTYPE).tobytes()


def deserialize_embedding(blob: bytes) -> np.ndarray:
    if len(blob) % EMBEDDING_DTYPE.itemsize != 0:
        raise CorruptionError(
            f"Invalid embedding data in store: {len(blob)} bytes is not a multiple of "
            f"{EMBEDDING_DTYPE.itemsize}"
        )
    return np.frombuffer(blob, dtype=EMBEDDING_DTYPE)


def embedding_dimension(blob: bytes) -> int:
    return len(deserialize_embedding(blob))
