"""
CPU reference kernels for unary elementwise operations.

Each kernel allocates a fresh float32 buffer and applies a scalar function to
every element of the input (NumPy ufuncs evaluate in float64 and round on
store). Domain errors such as `log(-1)` or `asin(2)` produce NaN rather than
warnings or exceptions: NaN is part of the numeric semantics.

`relu` is the exception to the float32 rule: it preserves the input dtype and
propagates NaN explicitly, including the int32/bool NaN sentinels.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from ...domain._dtype import DType, get_nan
from ..tensor._tensor import Tensor, storage_dtype

# Stable and attracting fixed point (0, 1) for normalized weights,
# see https://arxiv.org/abs/1706.02515
SELU_SCALE_ALPHA = 1.7580993408473768599402175208123
SELU_SCALE = 1.0507009873554804934193349852946


def _map_float32(x: Tensor, fn: Callable[[np.ndarray], np.ndarray]) -> Tensor:
    values = x.values().astype(np.float64)
    with np.errstate(all="ignore"):
        out = fn(values)
    return Tensor.make(x.shape, np.asarray(out, dtype=np.float32), DType.FLOAT32)


def ceil_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.ceil)


def floor_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.floor)


def exp_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.exp)


def log_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.log)


def sqrt_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.sqrt)


def square_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, lambda v: v * v)


def abs_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.abs)


def sigmoid_cpu(x: Tensor) -> Tensor:
    """`1 / (1 + exp(-x))`."""
    return _map_float32(x, lambda v: 1.0 / (1.0 + np.exp(-v)))


def sin_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.sin)


def cos_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.cos)


def tan_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.tan)


def asin_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.arcsin)


def acos_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.arccos)


def atan_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.arctan)


def sinh_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.sinh)


def cosh_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.cosh)


def tanh_cpu(x: Tensor) -> Tensor:
    return _map_float32(x, np.tanh)


def relu_cpu(x: Tensor) -> Tensor:
    """
    `max(0, x)`, dtype-preserving, with explicit NaN propagation.

    `max(0, NaN)` is not NaN in every numeric runtime, so NaN elements (or the
    int32/bool NaN sentinel) are copied through as the dtype's NaN.
    """
    vals = x.values()
    nan = get_nan(x.dtype)
    if x.dtype is DType.FLOAT32:
        out = np.where(np.isnan(vals), np.float32(nan), np.maximum(vals, 0))
    else:
        out = np.where(vals == nan, nan, np.maximum(vals, 0))
    return Tensor.make(x.shape, out.astype(storage_dtype(x.dtype)), x.dtype)


def elu_cpu(x: Tensor) -> Tensor:
    """`x` for `x >= 0`, else `exp(x) - 1`."""
    return _map_float32(x, lambda v: np.where(v >= 0, v, np.exp(v) - 1.0))


def elu_der_cpu(x: Tensor) -> Tensor:
    """Derivative of ELU: 1 for `x >= 0`, else `exp(x)`."""
    return _map_float32(x, lambda v: np.where(v >= 0, 1.0, np.exp(v)))


def selu_cpu(x: Tensor) -> Tensor:
    """Scaled ELU with the self-normalizing constants."""
    return _map_float32(
        x,
        lambda v: np.where(
            v >= 0, SELU_SCALE * v, SELU_SCALE_ALPHA * (np.exp(v) - 1.0)
        ),
    )


def leaky_relu_cpu(x: Tensor, alpha: float) -> Tensor:
    """`x` for `x >= 0`, else `alpha * x`."""
    return _map_float32(x, lambda v: np.where(v >= 0, v, alpha * v))


def clip_cpu(x: Tensor, min_value: float, max_value: float) -> Tensor:
    """`min(max_value, max(min_value, x))`, NaN passes through."""
    return _map_float32(x, lambda v: np.minimum(max_value, np.maximum(min_value, v)))


def step_cpu(x: Tensor, alpha: float = 0.0) -> Tensor:
    """
    1 for `x > 0`, `alpha` for `x < 0`, otherwise `x` itself.

    Zero maps to zero and NaN to NaN.
    """
    return _map_float32(
        x, lambda v: np.where(v > 0, 1.0, np.where(v < 0, alpha, v))
    )
