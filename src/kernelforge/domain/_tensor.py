"""
Tensor interface definitions.

This module defines the domain-level interface for tensor values using
structural typing. Backends and kernels type against `ITensor` so that
alternative tensor storages can satisfy the same contract as the NumPy-backed
implementation in the infrastructure layer.
"""

from __future__ import annotations

from typing import Any, List, Protocol, Sequence, Union, runtime_checkable

from ._dtype import DType

Number = Union[int, float]


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` is an immutable-shape, typed, n-dimensional array whose
    elements live in a contiguous row-major buffer. Kernels only read tensor
    buffers; every kernel returns a newly allocated tensor.
    """

    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the shape of the tensor.

        Returns
        -------
        tuple[int, ...]
            The tensor's shape; `()` for a scalar.
        """
        ...

    @property
    def dtype(self) -> DType:
        """Element type of the tensor."""
        ...

    @property
    def rank(self) -> int:
        """Number of dimensions."""
        ...

    @property
    def size(self) -> int:
        """Number of elements, `product(shape)`."""
        ...

    def values(self) -> Any:
        """
        Return the flat, read-only backing buffer.

        Returns
        -------
        Any
            Backend-native flat array of `size` elements.
        """
        ...

    def get(self, *loc: int) -> Number:
        """Read the element at multi-index `loc`."""
        ...

    def index_to_loc(self, index: int) -> List[int]:
        """Convert a linear offset into a multi-index."""
        ...

    def loc_to_index(self, loc: Sequence[int]) -> int:
        """Convert a multi-index into a linear offset."""
        ...

    def expect_rank(self, rank: int, name: str = "x") -> "ITensor":
        """
        Assert the tensor has the given rank.

        Raises
        ------
        ShapeMismatchError
            If `self.rank != rank`.
        """
        ...

    def to_numpy(self) -> Any:
        """Return a shaped copy of the tensor as a backend-native array."""
        ...
