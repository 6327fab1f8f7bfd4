"""
Operation input records.

Every backend method receives exactly one `OpConfig`: a bundle of named tensor
operands (`inputs`) and named scalar/shape parameters (`args`). This is the
stable calling convention between the math layer and any backend
implementation. A record is created by the caller, consumed once by the
backend, and never retained.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ._errors import InvalidArgumentError
from ._tensor import ITensor

_REQUIRED = object()


@dataclass(frozen=True)
class OpConfig:
    """
    Named operands and arguments for a single backend call.

    Parameters
    ----------
    inputs : Mapping[str, ITensor]
        Tensor operands by name (e.g., `{"a": a, "b": b}`). Optional operands
        may be present with a value of None.
    args : Mapping[str, Any], optional
        Scalar and shape parameters by name (e.g., `{"axes": [1]}`).

    Notes
    -----
    Both mappings are frozen into read-only views on construction.
    """

    inputs: Mapping[str, Optional[ITensor]]
    args: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", MappingProxyType(dict(self.inputs)))
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))

    def input(self, name: str) -> ITensor:
        """
        Return a required tensor operand.

        Raises
        ------
        InvalidArgumentError
            If the operand is missing or None.
        """
        value = self.inputs.get(name)
        if value is None:
            raise InvalidArgumentError(f"missing required input '{name}'")
        return value

    def optional_input(self, name: str) -> Optional[ITensor]:
        """Return an optional tensor operand, or None when absent."""
        return self.inputs.get(name)

    def arg(self, name: str, default: Any = _REQUIRED) -> Any:
        """
        Return a named argument.

        Raises
        ------
        InvalidArgumentError
            If the argument is missing and no default was given.
        """
        if name in self.args:
            return self.args[name]
        if default is _REQUIRED:
            raise InvalidArgumentError(f"missing required argument '{name}'")
        return default
