"""
Reference CPU backend.

`CPUBackend` implements the whole operation catalog by unpacking each
`OpConfig` and delegating to the `*_cpu` kernels in `infrastructure.ops`.
It is single-threaded, holds no mutable state and is safe to share.

Argument names
--------------
- reductions: `axes` (int, sequence or None for all axes)
- `top_k_values` / `top_k_indices`: `k`
- `mat_mul`: `a_orientation`, `b_orientation` (default REGULAR)
- `sliceNd`: `begin`, `size`; `concatNd`: `axis`
- convolution and pooling: `conv_info` (a `Conv2DInfo`)
- `leaky_relu`, `step`: `alpha`; `clip`: `min`, `max`
- `tile`: `reps`; `transpose`: `perm`
- `resize_bilinear3d`: `new_shape_2d`, `align_corners`
- `batch_normalization*d`: `variance_epsilon`
- `multinomial`: `num_samples`, `seed`
- `one_hot`: `depth`, `on_value`, `off_value`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...domain._backend import Backend
from ...domain._op_config import OpConfig
from ...domain.shape._axis import parse_axis_param
from ..ops import (
    batchnorm_cpu,
    conv2d_cpu,
    elementwise_cpu,
    matmul_cpu,
    memory_cpu,
    pool2d_cpu,
    reduce_cpu,
    resize_cpu,
    sampling_cpu,
    topk_cpu,
    unary_cpu,
)
from ..tensor._tensor import Tensor


@dataclass(frozen=True)
class CPUBackendConfig:
    """
    Construction-time options for `CPUBackend`.

    Parameters
    ----------
    probability_atol : float
        Tolerance used when checking that multinomial probability rows sum
        to 1.
    warn_on_unnormalized_probabilities : bool
        If True, `multinomial` emits a `RuntimeWarning` for rows outside the
        tolerance. Sampling proceeds either way.
    """

    probability_atol: float = 1e-3
    warn_on_unnormalized_probabilities: bool = True


class CPUBackend(Backend):
    """Single-threaded NumPy reference backend implementing every operation."""

    name = "cpu"

    def __init__(self, config: Optional[CPUBackendConfig] = None) -> None:
        self.config = config if config is not None else CPUBackendConfig()

    # ------------------------------------------------------------------ matmul

    def mat_mul(self, config: OpConfig) -> Tensor:
        return matmul_cpu.mat_mul_cpu(
            config.input("a"),
            config.input("b"),
            config.arg("a_orientation", matmul_cpu.MatrixOrientation.REGULAR),
            config.arg("b_orientation", matmul_cpu.MatrixOrientation.REGULAR),
        )

    # ------------------------------------------------------------------ layout

    def clone(self, config: OpConfig) -> Tensor:
        return memory_cpu.clone_cpu(config.input("x"))

    def _slice(self, config: OpConfig, rank: int) -> Tensor:
        return memory_cpu.slice_cpu(
            config.input("x"), config.arg("begin"), config.arg("size"), rank
        )

    def slice1d(self, config: OpConfig) -> Tensor:
        return self._slice(config, 1)

    def slice2d(self, config: OpConfig) -> Tensor:
        return self._slice(config, 2)

    def slice3d(self, config: OpConfig) -> Tensor:
        return self._slice(config, 3)

    def slice4d(self, config: OpConfig) -> Tensor:
        return self._slice(config, 4)

    def _concat(self, config: OpConfig, rank: int) -> Tensor:
        return memory_cpu.concat_cpu(
            config.input("a"), config.input("b"), config.arg("axis"), rank
        )

    def concat1d(self, config: OpConfig) -> Tensor:
        return self._concat(config, 1)

    def concat2d(self, config: OpConfig) -> Tensor:
        return self._concat(config, 2)

    def concat3d(self, config: OpConfig) -> Tensor:
        return self._concat(config, 3)

    def concat4d(self, config: OpConfig) -> Tensor:
        return self._concat(config, 4)

    def tile(self, config: OpConfig) -> Tensor:
        return memory_cpu.tile_cpu(config.input("x"), config.arg("reps"))

    def transpose(self, config: OpConfig) -> Tensor:
        return memory_cpu.transpose_cpu(config.input("x"), config.arg("perm"))

    # ------------------------------------------------------------- elementwise

    def neg(self, config: OpConfig) -> Tensor:
        return elementwise_cpu.neg_cpu(config.input("x"))

    def add(self, config: OpConfig) -> Tensor:
        return elementwise_cpu.add_cpu(config.input("a"), config.input("b"))

    def subtract(self, config: OpConfig) -> Tensor:
        return elementwise_cpu.subtract_cpu(config.input("a"), config.input("b"))

    def multiply(self, config: OpConfig) -> Tensor:
        return elementwise_cpu.multiply_cpu(config.input("a"), config.input("b"))

    def divide(self, config: OpConfig) -> Tensor:
        return elementwise_cpu.divide_cpu(config.input("a"), config.input("b"))

    def equal(self, config: OpConfig) -> Tensor:
        return elementwise_cpu.equal_cpu(config.input("a"), config.input("b"))

    # -------------------------------------------------------------- reductions

    def _axes(self, config: OpConfig, x: Tensor):
        return parse_axis_param(config.arg("axes", None), x.shape)

    def sum(self, config: OpConfig) -> Tensor:
        x = config.input("x")
        return reduce_cpu.sum_cpu(x, self._axes(config, x))

    def min(self, config: OpConfig) -> Tensor:
        x = config.input("x")
        return reduce_cpu.min_cpu(x, self._axes(config, x))

    def max(self, config: OpConfig) -> Tensor:
        x = config.input("x")
        return reduce_cpu.max_cpu(x, self._axes(config, x))

    def arg_min(self, config: OpConfig) -> Tensor:
        x = config.input("x")
        return reduce_cpu.arg_min_cpu(x, self._axes(config, x))

    def arg_max(self, config: OpConfig) -> Tensor:
        x = config.input("x")
        return reduce_cpu.arg_max_cpu(x, self._axes(config, x))

    def top_k_values(self, config: OpConfig) -> Tensor:
        values, _ = topk_cpu.top_k_cpu(config.input("x"), config.arg("k"))
        return values

    def top_k_indices(self, config: OpConfig) -> Tensor:
        _, indices = topk_cpu.top_k_cpu(config.input("x"), config.arg("k"))
        return indices

    # ------------------------------------------------------------------- unary

    def ceil(self, config: OpConfig) -> Tensor:
        return unary_cpu.ceil_cpu(config.input("x"))

    def floor(self, config: OpConfig) -> Tensor:
        return unary_cpu.floor_cpu(config.input("x"))

    def exp(self, config: OpConfig) -> Tensor:
        return unary_cpu.exp_cpu(config.input("x"))

    def log(self, config: OpConfig) -> Tensor:
        return unary_cpu.log_cpu(config.input("x"))

    def sqrt(self, config: OpConfig) -> Tensor:
        return unary_cpu.sqrt_cpu(config.input("x"))

    def square(self, config: OpConfig) -> Tensor:
        return unary_cpu.square_cpu(config.input("x"))

    def abs(self, config: OpConfig) -> Tensor:
        return unary_cpu.abs_cpu(config.input("x"))

    def sigmoid(self, config: OpConfig) -> Tensor:
        return unary_cpu.sigmoid_cpu(config.input("x"))

    def sin(self, config: OpConfig) -> Tensor:
        return unary_cpu.sin_cpu(config.input("x"))

    def cos(self, config: OpConfig) -> Tensor:
        return unary_cpu.cos_cpu(config.input("x"))

    def tan(self, config: OpConfig) -> Tensor:
        return unary_cpu.tan_cpu(config.input("x"))

    def asin(self, config: OpConfig) -> Tensor:
        return unary_cpu.asin_cpu(config.input("x"))

    def acos(self, config: OpConfig) -> Tensor:
        return unary_cpu.acos_cpu(config.input("x"))

    def atan(self, config: OpConfig) -> Tensor:
        return unary_cpu.atan_cpu(config.input("x"))

    def sinh(self, config: OpConfig) -> Tensor:
        return unary_cpu.sinh_cpu(config.input("x"))

    def cosh(self, config: OpConfig) -> Tensor:
        return unary_cpu.cosh_cpu(config.input("x"))

    def tanh(self, config: OpConfig) -> Tensor:
        return unary_cpu.tanh_cpu(config.input("x"))

    def relu(self, config: OpConfig) -> Tensor:
        return unary_cpu.relu_cpu(config.input("x"))

    def elu(self, config: OpConfig) -> Tensor:
        return unary_cpu.elu_cpu(config.input("x"))

    def elu_der(self, config: OpConfig) -> Tensor:
        return unary_cpu.elu_der_cpu(config.input("x"))

    def selu(self, config: OpConfig) -> Tensor:
        return unary_cpu.selu_cpu(config.input("x"))

    def leaky_relu(self, config: OpConfig) -> Tensor:
        return unary_cpu.leaky_relu_cpu(config.input("x"), config.arg("alpha"))

    def clip(self, config: OpConfig) -> Tensor:
        return unary_cpu.clip_cpu(
            config.input("x"), config.arg("min"), config.arg("max")
        )

    def step(self, config: OpConfig) -> Tensor:
        return unary_cpu.step_cpu(config.input("x"), config.arg("alpha", 0.0))

    # ------------------------------------------------------------ convolution

    def conv2d(self, config: OpConfig) -> Tensor:
        return conv2d_cpu.conv2d_cpu(
            config.input("x"),
            config.input("filter"),
            config.optional_input("bias"),
            config.arg("conv_info"),
        )

    def conv2d_der_input(self, config: OpConfig) -> Tensor:
        return conv2d_cpu.conv2d_der_input_cpu(
            config.input("dy"), config.input("filter"), config.arg("conv_info")
        )

    def conv2d_der_filter(self, config: OpConfig) -> Tensor:
        return conv2d_cpu.conv2d_der_filter_cpu(
            config.input("x"), config.input("dy"), config.arg("conv_info")
        )

    def conv2d_der_bias(self, config: OpConfig) -> Tensor:
        return conv2d_cpu.conv2d_der_bias_cpu(config.input("dy"))

    def depthwise_conv2d(self, config: OpConfig) -> Tensor:
        return conv2d_cpu.depthwise_conv2d_cpu(
            config.input("x"), config.input("filter"), config.arg("conv_info")
        )

    # ---------------------------------------------------------------- pooling

    def max_pool(self, config: OpConfig) -> Tensor:
        return pool2d_cpu.max_pool_cpu(config.input("x"), config.arg("conv_info"))

    def min_pool(self, config: OpConfig) -> Tensor:
        return pool2d_cpu.min_pool_cpu(config.input("x"), config.arg("conv_info"))

    def avg_pool(self, config: OpConfig) -> Tensor:
        return pool2d_cpu.avg_pool_cpu(config.input("x"), config.arg("conv_info"))

    def max_pool_backprop(self, config: OpConfig) -> Tensor:
        return pool2d_cpu.max_pool_backprop_cpu(
            config.input("dy"), config.input("x"), config.arg("conv_info")
        )

    # ------------------------------------------------------------------- misc

    def resize_bilinear3d(self, config: OpConfig) -> Tensor:
        return resize_cpu.resize_bilinear3d_cpu(
            config.input("x"),
            config.arg("new_shape_2d"),
            config.arg("align_corners", False),
        )

    def _batch_normalization(self, config: OpConfig, rank: int) -> Tensor:
        return batchnorm_cpu.batch_normalization_cpu(
            config.input("x"),
            config.input("mean"),
            config.input("variance"),
            config.arg("variance_epsilon", 0.001),
            scale=config.optional_input("scale"),
            offset=config.optional_input("offset"),
            rank=rank,
        )

    def batch_normalization2d(self, config: OpConfig) -> Tensor:
        return self._batch_normalization(config, 2)

    def batch_normalization3d(self, config: OpConfig) -> Tensor:
        return self._batch_normalization(config, 3)

    def multinomial(self, config: OpConfig) -> Tensor:
        cfg = self.config
        return sampling_cpu.multinomial_cpu(
            config.input("probabilities"),
            config.arg("num_samples"),
            config.arg("seed"),
            cfg.probability_atol if cfg.warn_on_unnormalized_probabilities else None,
        )

    def one_hot(self, config: OpConfig) -> Tensor:
        return sampling_cpu.one_hot_cpu(
            config.input("indices"),
            config.arg("depth"),
            config.arg("on_value", 1.0),
            config.arg("off_value", 0.0),
        )
