"""
Compute backend contract.

A backend is a wide, fixed catalog of kernel methods. Every method takes a
single `OpConfig` and returns a newly allocated tensor; no method mutates its
inputs. New backends subclass `Backend` and override the operations they
support. Anything left alone raises `BackendNotImplementedError`, and the
set of supported operations is discoverable up front through `supports()` and
`implemented_operations()` instead of only failing at call time.
"""

from __future__ import annotations

from abc import ABC
from typing import FrozenSet, Tuple

from ._errors import BackendNotImplementedError, InvalidArgumentError
from ._op_config import OpConfig
from ._tensor import ITensor

OPERATIONS: Tuple[str, ...] = (
    "mat_mul",
    "clone",
    "slice1d",
    "slice2d",
    "slice3d",
    "slice4d",
    "concat1d",
    "concat2d",
    "concat3d",
    "concat4d",
    "neg",
    "add",
    "subtract",
    "multiply",
    "divide",
    "sum",
    "arg_min",
    "arg_max",
    "equal",
    "top_k_values",
    "top_k_indices",
    "min",
    "max",
    "ceil",
    "floor",
    "exp",
    "log",
    "sqrt",
    "square",
    "relu",
    "elu",
    "elu_der",
    "selu",
    "leaky_relu",
    "clip",
    "abs",
    "sigmoid",
    "sin",
    "cos",
    "tan",
    "asin",
    "acos",
    "atan",
    "sinh",
    "cosh",
    "tanh",
    "step",
    "conv2d",
    "conv2d_der_input",
    "conv2d_der_filter",
    "conv2d_der_bias",
    "depthwise_conv2d",
    "max_pool",
    "max_pool_backprop",
    "min_pool",
    "avg_pool",
    "tile",
    "transpose",
    "resize_bilinear3d",
    "batch_normalization2d",
    "batch_normalization3d",
    "multinomial",
    "one_hot",
)


def _unimplemented(op: str):
    def method(self: "Backend", config: OpConfig) -> ITensor:
        raise BackendNotImplementedError(op, self.name)

    method.__name__ = op
    method.__qualname__ = f"Backend.{op}"
    method.__doc__ = f"Run the `{op}` kernel. Not implemented by the base backend."
    method._kf_unimplemented = True
    return method


class Backend(ABC):
    """
    Base class for compute backends.

    Every catalog operation is declared here with a default body that raises
    `BackendNotImplementedError`. Concrete backends override the operations
    they provide.

    Notes
    -----
    - Methods are pure: identical inputs produce bit-identical outputs.
    - Operand packaging is always `OpConfig(inputs={...}, args={...})`.
    """

    name: str = "abstract"

    @classmethod
    def supports(cls, op: str) -> bool:
        """
        Whether this backend implements `op`.

        Raises
        ------
        InvalidArgumentError
            If `op` is not part of the operation catalog.
        """
        if op not in OPERATIONS:
            raise InvalidArgumentError(f"Unknown backend operation '{op}'.")
        return not getattr(getattr(cls, op), "_kf_unimplemented", False)

    @classmethod
    def implemented_operations(cls) -> FrozenSet[str]:
        """The subset of the catalog this backend implements."""
        return frozenset(op for op in OPERATIONS if cls.supports(op))

    def execute(self, op: str, config: OpConfig) -> ITensor:
        """
        Run catalog operation `op` by name.

        Raises
        ------
        InvalidArgumentError
            If `op` is not in the catalog.
        BackendNotImplementedError
            If this backend does not implement `op`.
        """
        if not self.supports(op):
            raise BackendNotImplementedError(op, self.name)
        return getattr(self, op)(config)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


for _op in OPERATIONS:
    setattr(Backend, _op, _unimplemented(_op))
del _op
