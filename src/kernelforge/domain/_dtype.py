"""
Element types and NaN encoding.

KernelForge tensors carry one of three element types. Float tensors use IEEE
NaN; integer and boolean tensors cannot represent NaN natively, so they use a
dedicated sentinel value. This lets arg-reductions and comparisons propagate
"not a number" conditions through non-float outputs.

Notes
-----
The int32 sentinel is `-(2**31)`. A legitimate int32 value equal to it is
indistinguishable from NaN. Callers that want an explicit answer should use
`nan_mask` (or `Tensor.is_nan()`) rather than comparing against the sentinel.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Iterable, List, Union

Number = Union[int, float]

NAN_INT32 = -(2**31)
NAN_BOOL = 255


class DType(Enum):
    """
    Enumeration of supported tensor element types.

    Attributes
    ----------
    FLOAT32 : DType
        32-bit IEEE float.
    INT32 : DType
        32-bit signed integer.
    BOOL : DType
        Boolean stored as 0/1 in a byte.
    """

    FLOAT32 = "float32"
    INT32 = "int32"
    BOOL = "bool"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, dtype: Union["DType", str]) -> "DType":
        """
        Normalize a dtype given as a `DType` or its string name.

        Raises
        ------
        ValueError
            If the name is not a supported dtype.
        """
        if isinstance(dtype, DType):
            return dtype
        return cls(str(dtype))


# sum() of int32/bool accumulates in int32
SUM_DTYPES = {
    DType.FLOAT32: DType.FLOAT32,
    DType.INT32: DType.INT32,
    DType.BOOL: DType.INT32,
}


def get_nan(dtype: DType) -> Number:
    """Return the value that encodes NaN for `dtype`."""
    if dtype is DType.FLOAT32:
        return math.nan
    if dtype is DType.INT32:
        return NAN_INT32
    return NAN_BOOL


def is_val_nan(value: Number, dtype: DType) -> bool:
    """
    Check whether a scalar encodes NaN under `dtype`.

    Parameters
    ----------
    value : int or float
        Scalar read from a tensor buffer.
    dtype : DType
        Element type of the tensor the value came from.

    Returns
    -------
    bool
        True if `value` is NaN (float32) or the dtype's NaN sentinel.
    """
    if dtype is DType.FLOAT32:
        return math.isnan(value)
    if dtype is DType.INT32:
        return int(value) == NAN_INT32
    return int(value) == NAN_BOOL


def nan_mask(values: Iterable[Number], dtype: DType) -> List[bool]:
    """Explicit per-element NaN flags for a flat sequence of values."""
    return [is_val_nan(v, dtype) for v in values]
