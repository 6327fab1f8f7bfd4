"""
KernelForge: a tensor-computation engine with a pluggable backend contract
and a reference CPU implementation.
"""

from .domain import (
    NAN_BOOL,
    NAN_INT32,
    OPERATIONS,
    Backend,
    BackendNotImplementedError,
    DType,
    InvalidArgumentError,
    KernelForgeError,
    OpConfig,
    ShapeMismatchError,
    UnsupportedDTypeError,
)
from .domain.shape import (
    Conv2DInfo,
    compute_conv2d_info,
    compute_depthwise_conv2d_info,
    compute_pool2d_info,
)
from .infrastructure.backends import CPUBackend, CPUBackendConfig
from .infrastructure.ops.matmul_cpu import MatrixOrientation
from .infrastructure.tensor import Tensor

__version__ = "0.1.0"

__all__ = [
    "Backend",
    "BackendNotImplementedError",
    "CPUBackend",
    "CPUBackendConfig",
    "Conv2DInfo",
    "DType",
    "InvalidArgumentError",
    "KernelForgeError",
    "MatrixOrientation",
    "NAN_BOOL",
    "NAN_INT32",
    "OPERATIONS",
    "OpConfig",
    "ShapeMismatchError",
    "Tensor",
    "UnsupportedDTypeError",
    "compute_conv2d_info",
    "compute_depthwise_conv2d_info",
    "compute_pool2d_info",
]
