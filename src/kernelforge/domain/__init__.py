from ._backend import OPERATIONS, Backend
from ._dtype import NAN_BOOL, NAN_INT32, DType, get_nan, is_val_nan, nan_mask
from ._errors import (
    BackendNotImplementedError,
    InvalidArgumentError,
    KernelForgeError,
    ShapeMismatchError,
    UnsupportedDTypeError,
)
from ._op_config import OpConfig
from ._tensor import ITensor

__all__ = [
    Backend.__name__,
    DType.__name__,
    ITensor.__name__,
    OpConfig.__name__,
    KernelForgeError.__name__,
    ShapeMismatchError.__name__,
    UnsupportedDTypeError.__name__,
    BackendNotImplementedError.__name__,
    InvalidArgumentError.__name__,
    get_nan.__name__,
    is_val_nan.__name__,
    nan_mask.__name__,
    "OPERATIONS",
    "NAN_INT32",
    "NAN_BOOL",
]
