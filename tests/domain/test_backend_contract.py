import math
import unittest

from src.kernelforge.domain import (
    NAN_BOOL,
    NAN_INT32,
    OPERATIONS,
    Backend,
    BackendNotImplementedError,
    DType,
    InvalidArgumentError,
    KernelForgeError,
    OpConfig,
)
from src.kernelforge.domain._dtype import get_nan, is_val_nan, nan_mask


class _AddOnlyBackend(Backend):
    name = "add-only"

    def add(self, config):
        return ("added", config.input("a"), config.input("b"))


class TestDType(unittest.TestCase):
    def test_parse(self):
        self.assertIs(DType.parse("int32"), DType.INT32)
        self.assertIs(DType.parse(DType.BOOL), DType.BOOL)
        self.assertEqual(str(DType.FLOAT32), "float32")
        with self.assertRaises(ValueError):
            DType.parse("complex64")

    def test_nan_encoding(self):
        self.assertTrue(math.isnan(get_nan(DType.FLOAT32)))
        self.assertEqual(get_nan(DType.INT32), NAN_INT32)
        self.assertEqual(get_nan(DType.BOOL), NAN_BOOL)

        self.assertTrue(is_val_nan(float("nan"), DType.FLOAT32))
        self.assertFalse(is_val_nan(0.0, DType.FLOAT32))
        self.assertTrue(is_val_nan(-(2**31), DType.INT32))
        self.assertFalse(is_val_nan(-(2**31) + 1, DType.INT32))
        self.assertTrue(is_val_nan(255, DType.BOOL))
        self.assertEqual(nan_mask([1, 255, 0], DType.BOOL), [False, True, False])


class TestOpConfig(unittest.TestCase):
    def test_inputs_and_args(self):
        cfg = OpConfig(inputs={"x": "tensor", "bias": None}, args={"axes": [1]})
        self.assertEqual(cfg.input("x"), "tensor")
        self.assertIsNone(cfg.optional_input("bias"))
        self.assertIsNone(cfg.optional_input("scale"))
        self.assertEqual(cfg.arg("axes"), [1])
        self.assertEqual(cfg.arg("alpha", 0.5), 0.5)

    def test_missing_values_raise(self):
        cfg = OpConfig(inputs={"bias": None})
        with self.assertRaises(InvalidArgumentError):
            cfg.input("x")
        with self.assertRaises(InvalidArgumentError):
            cfg.input("bias")
        with self.assertRaises(InvalidArgumentError):
            cfg.arg("k")

    def test_is_read_only(self):
        inputs = {"x": 1}
        cfg = OpConfig(inputs=inputs)
        inputs["y"] = 2
        self.assertNotIn("y", cfg.inputs)
        with self.assertRaises(TypeError):
            cfg.inputs["z"] = 3


class TestBackendContract(unittest.TestCase):
    def test_catalog_is_complete(self):
        for op in (
            "mat_mul",
            "slice4d",
            "concat1d",
            "top_k_indices",
            "conv2d_der_filter",
            "depthwise_conv2d",
            "max_pool_backprop",
            "resize_bilinear3d",
            "batch_normalization3d",
            "multinomial",
            "one_hot",
        ):
            self.assertIn(op, OPERATIONS)
            self.assertTrue(callable(getattr(Backend, op)))
        self.assertEqual(len(set(OPERATIONS)), len(OPERATIONS))

    def test_unimplemented_operation_fails_loudly(self):
        backend = _AddOnlyBackend()
        with self.assertRaises(BackendNotImplementedError) as cm:
            backend.conv2d(OpConfig(inputs={}))
        err = cm.exception
        self.assertEqual(err.op, "conv2d")
        self.assertEqual(err.backend, "add-only")
        self.assertIsInstance(err, NotImplementedError)
        self.assertIsInstance(err, KernelForgeError)

    def test_capability_query(self):
        self.assertTrue(_AddOnlyBackend.supports("add"))
        self.assertFalse(_AddOnlyBackend.supports("subtract"))
        self.assertEqual(_AddOnlyBackend.implemented_operations(), frozenset({"add"}))
        self.assertEqual(Backend.implemented_operations(), frozenset())
        with self.assertRaises(InvalidArgumentError):
            _AddOnlyBackend.supports("fft")

    def test_execute_dispatches_by_name(self):
        backend = _AddOnlyBackend()
        result = backend.execute("add", OpConfig(inputs={"a": 1, "b": 2}))
        self.assertEqual(result, ("added", 1, 2))
        with self.assertRaises(BackendNotImplementedError):
            backend.execute("multiply", OpConfig(inputs={"a": 1, "b": 2}))
        with self.assertRaises(InvalidArgumentError):
            backend.execute("fft", OpConfig(inputs={}))


if __name__ == "__main__":
    unittest.main()
