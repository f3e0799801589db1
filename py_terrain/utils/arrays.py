"""Numpy array helpers shared across generation stages."""

import numpy as np

UINT8_MAX = np.iinfo(np.uint8).max
UINT16_MAX = np.iinfo(np.uint16).max
UINT32_MAX = np.iinfo(np.uint32).max


def get_typed_array_dtype(max_value: int) -> np.dtype:
    """Smallest unsigned integer dtype able to hold max_value."""
    if max_value < 0:
        raise ValueError(f"max_value must be non-negative, got {max_value}")
    if max_value <= UINT8_MAX:
        return np.dtype(np.uint8)
    if max_value <= UINT16_MAX:
        return np.dtype(np.uint16)
    if max_value <= UINT32_MAX:
        return np.dtype(np.uint32)
    return np.dtype(np.uint64)


def create_typed_array(max_value: int, length: int) -> np.ndarray:
    """Zeroed array whose element width fits ids up to max_value."""
    return np.zeros(length, dtype=get_typed_array_dtype(max_value))
