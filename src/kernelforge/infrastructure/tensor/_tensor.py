"""
Concrete Tensor implementation (NumPy backend).

This module provides the concrete `Tensor` value type that satisfies the
domain-level `ITensor` protocol. A tensor holds:
- an immutable shape,
- a `DType` (float32, int32 or bool),
- a flat, contiguous, row-major NumPy buffer of `product(shape)` elements.

Design notes
------------
- The buffer is exclusively owned by the tensor and is flagged read-only
  (`writeable=False`) on construction, so kernels can never mutate an input.
  Kernels build a fresh NumPy array and wrap it with `Tensor.make`.
- There are no rank-specialized subclasses; a single generic type carries a
  runtime rank check (`expect_rank`) instead.
- bool tensors are stored as uint8 so the NaN sentinel (255) can be encoded.
"""

from __future__ import annotations

import warnings
from typing import Any, List, Optional, Sequence, Union

import numpy as np

from ...domain._dtype import NAN_INT32, DType, get_nan
from ...domain._errors import ShapeMismatchError, UnsupportedDTypeError
from ...domain._tensor import ITensor
from ...domain.shape._indexing import (
    compute_strides,
    index_to_loc,
    loc_to_index,
    size_from_shape,
)

Number = Union[int, float]

STORAGE_DTYPES = {
    DType.FLOAT32: np.float32,
    DType.INT32: np.int32,
    DType.BOOL: np.uint8,
}


def storage_dtype(dtype: DType) -> type:
    """
    NumPy storage type for a KernelForge dtype.

    Raises
    ------
    UnsupportedDTypeError
        If `dtype` is not one of the supported element types.
    """
    try:
        return STORAGE_DTYPES[dtype]
    except KeyError:
        raise UnsupportedDTypeError("tensor storage", dtype) from None


def _normalize_shape(shape: Sequence[int]) -> tuple[int, ...]:
    out = []
    for d in shape:
        if isinstance(d, bool) or int(d) != d or int(d) <= 0:
            raise ShapeMismatchError(
                f"Tensor dimensions must be positive integers, got {tuple(shape)}.",
                shape,
            )
        out.append(int(d))
    return tuple(out)


class Tensor(ITensor):
    """
    Immutable-shape, typed, n-dimensional array backed by a NumPy buffer.

    Parameters
    ----------
    shape : Sequence[int]
        Tensor shape. Every dimension must be a positive integer; `()` is a
        scalar.
    values : np.ndarray
        Flat or shaped buffer of exactly `product(shape)` elements. It is
        copied into storage of the dtype's NumPy type.
    dtype : DType
        Element type.

    Raises
    ------
    ShapeMismatchError
        If the number of values does not match the shape.
    UnsupportedDTypeError
        If `dtype` is not supported.

    Notes
    -----
    Prefer the `make`, `zeros`, `from_numpy` and `scalar` factories.
    """

    __slots__ = ("_shape", "_dtype", "_strides", "_size", "_data")

    def __init__(
        self, shape: Sequence[int], values: np.ndarray, dtype: DType = DType.FLOAT32
    ) -> None:
        dtype = DType.parse(dtype)
        np_dtype = storage_dtype(dtype)
        self._shape = _normalize_shape(shape)
        self._dtype = dtype
        self._strides = compute_strides(self._shape)
        self._size = size_from_shape(self._shape)

        data = np.array(values, dtype=np_dtype, copy=True).reshape(-1)
        if data.size != self._size:
            raise ShapeMismatchError(
                f"Based on the provided shape {self._shape}, the tensor should "
                f"have {self._size} values but has {data.size}.",
                self._shape,
            )
        data.flags.writeable = False
        self._data = data

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def make(
        cls,
        shape: Sequence[int],
        values: Union[np.ndarray, Sequence[Number]],
        dtype: DType = DType.FLOAT32,
    ) -> "Tensor":
        """Build a tensor of `shape` from flat `values`."""
        return cls(shape, np.asarray(values), dtype)

    @classmethod
    def zeros(cls, shape: Sequence[int], dtype: DType = DType.FLOAT32) -> "Tensor":
        """Build a zero-filled tensor."""
        dtype = DType.parse(dtype)
        return cls(shape, np.zeros(size_from_shape(shape), dtype=storage_dtype(dtype)), dtype)

    @classmethod
    def scalar(cls, value: Number, dtype: DType = DType.FLOAT32) -> "Tensor":
        """Build a rank-0 tensor."""
        return cls((), np.asarray([value]), dtype)

    @classmethod
    def from_numpy(cls, arr: Any, dtype: Optional[DType] = None) -> "Tensor":
        """
        Build a tensor from an array-like, copying its data.

        Parameters
        ----------
        arr : array-like
            Source data; its shape becomes the tensor shape.
        dtype : Optional[DType]
            Target dtype. If None it is inferred: bool arrays -> BOOL,
            integer arrays -> INT32, anything else -> FLOAT32.

        Notes
        -----
        A `RuntimeWarning` is emitted when int32 data contains the value used
        as the int32 NaN sentinel, since it will read back as NaN.
        """
        a = np.asarray(arr)
        if dtype is None:
            if a.dtype == np.bool_:
                dtype = DType.BOOL
            elif np.issubdtype(a.dtype, np.integer):
                dtype = DType.INT32
            else:
                dtype = DType.FLOAT32
        dtype = DType.parse(dtype)
        if dtype is DType.INT32 and a.size and np.any(a == NAN_INT32):
            warnings.warn(
                f"int32 data contains {NAN_INT32}, which encodes NaN for int32 "
                "tensors; those elements will be treated as NaN.",
                RuntimeWarning,
                stacklevel=2,
            )
        return cls(a.shape, a, dtype)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def dtype(self) -> DType:
        return self._dtype

    @property
    def rank(self) -> int:
        return len(self._shape)

    @property
    def size(self) -> int:
        return self._size

    @property
    def strides(self) -> tuple[int, ...]:
        return self._strides

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def values(self) -> np.ndarray:
        """Return the flat, read-only backing buffer (no copy)."""
        return self._data

    def get(self, *loc: int) -> Number:
        """
        Read the element at multi-index `loc`.

        Returns a Python float for float32 tensors and a Python int otherwise.
        """
        v = self._data[loc_to_index(loc, self._strides)]
        return float(v) if self._dtype is DType.FLOAT32 else int(v)

    def index_to_loc(self, index: int) -> List[int]:
        return index_to_loc(index, self._shape, self._strides)

    def loc_to_index(self, loc: Sequence[int]) -> int:
        return loc_to_index(loc, self._strides)

    def expect_rank(self, rank: int, name: str = "x") -> "Tensor":
        if self.rank != rank:
            raise ShapeMismatchError(
                f"{name} must be rank {rank}, got rank {self.rank} with shape "
                f"{self._shape}.",
                self._shape,
            )
        return self

    def is_nan(self) -> np.ndarray:
        """
        Explicit NaN mask.

        Returns
        -------
        np.ndarray
            Boolean array of `shape`, True where the element is NaN (float32)
            or the dtype's NaN sentinel (int32/bool).
        """
        if self._dtype is DType.FLOAT32:
            mask = np.isnan(self._data)
        else:
            mask = self._data == get_nan(self._dtype)
        return mask.reshape(self._shape)

    def to_numpy(self) -> np.ndarray:
        """Return a writable, shaped copy of the buffer."""
        return self._data.reshape(self._shape).copy()

    def __repr__(self) -> str:
        return f"Tensor(shape={self._shape}, dtype={self._dtype})"
