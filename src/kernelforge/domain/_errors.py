"""
Kernel- and backend-related exceptions for KernelForge.

This module defines the error taxonomy surfaced by every compute backend.
Each error subclasses a matching builtin exception so callers can catch
either the KernelForge type or the familiar builtin (e.g. `ValueError`).

All of these are raised synchronously at the point of violation and before a
kernel allocates its output buffer, so a failing call never leaks a partially
written tensor. NaN inputs are *not* errors: they are part of the numeric
semantics and propagate through kernels deterministically.
"""

from __future__ import annotations

from typing import Optional, Sequence


class KernelForgeError(Exception):
    """
    Base class for all errors raised by KernelForge kernels and backends.
    """


class ShapeMismatchError(KernelForgeError, ValueError):
    """
    Raised when broadcast or fixed-rank shape constraints are violated.

    Attributes
    ----------
    shape_a : Optional[tuple[int, ...]]
        First offending shape, when the error involves a pair of shapes.
    shape_b : Optional[tuple[int, ...]]
        Second offending shape, when the error involves a pair of shapes.
    """

    def __init__(
        self,
        message: str,
        shape_a: Optional[Sequence[int]] = None,
        shape_b: Optional[Sequence[int]] = None,
    ) -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        message : str
            Human-readable description of the violated constraint.
        shape_a, shape_b : Optional[Sequence[int]]
            The shapes involved, if any.
        """
        super().__init__(message)
        self.shape_a = None if shape_a is None else tuple(shape_a)
        self.shape_b = None if shape_b is None else tuple(shape_b)


class UnsupportedDTypeError(KernelForgeError, TypeError):
    """
    Raised when an operation is invoked on a dtype it does not handle.

    Attributes
    ----------
    op : str
        The operation name (e.g., "tile").
    dtype : str
        String form of the rejected dtype.
    """

    def __init__(self, op: str, dtype: object) -> None:
        super().__init__(f"dtype '{dtype}' is not supported for {op}.")
        self.op = op
        self.dtype = str(dtype)


class BackendNotImplementedError(KernelForgeError, NotImplementedError):
    """
    Raised when a backend is asked to run an operation it does not implement.

    Partial backends inherit this behaviour from the `Backend` base class, so
    an unimplemented operation fails loudly instead of producing silently
    wrong results.

    Attributes
    ----------
    op : str
        The operation that was attempted (e.g., "conv2d").
    backend : str
        Name of the backend on which the operation was attempted.
    """

    def __init__(self, op: str, backend: str) -> None:
        super().__init__(f"{op} is not implemented by backend '{backend}'.")
        self.op = op
        self.backend = backend


class InvalidArgumentError(KernelForgeError, ValueError):
    """
    Raised for malformed scalar arguments, such as an out-of-range `k` for
    top-K, a non-positive pooling window or a missing operand.
    """
