import unittest

import numpy as np

from src.kernelforge.domain._dtype import NAN_BOOL, NAN_INT32, DType
from src.kernelforge.domain._errors import ShapeMismatchError
from src.kernelforge.infrastructure.ops.elementwise_cpu import (
    add_cpu,
    broadcasted_binary_op,
    divide_cpu,
    equal_cpu,
    multiply_cpu,
    neg_cpu,
    subtract_cpu,
)
from src.kernelforge.infrastructure.tensor import Tensor


def _t(arr, dtype=None) -> Tensor:
    return Tensor.from_numpy(np.asarray(arr), dtype)


class TestBroadcastedBinaryOps(unittest.TestCase):
    def setUp(self):
        self.rng = np.random.default_rng(0)

    def test_add_subtract_match_numpy_broadcasting(self):
        cases = [
            ((2, 3), (2, 3)),
            ((2, 3), (3,)),
            ((3, 1), (1, 4)),
            ((4, 1, 5), (3, 1)),
            ((2, 2), ()),
            ((1,), (2, 3)),
        ]
        for sa, sb in cases:
            with self.subTest(a=sa, b=sb):
                a = self.rng.standard_normal(sa).astype(np.float32)
                b = self.rng.standard_normal(sb).astype(np.float32)
                out = add_cpu(_t(a), _t(b))
                self.assertEqual(out.dtype, DType.FLOAT32)
                self.assertEqual(out.shape, np.broadcast_shapes(sa, sb))
                np.testing.assert_allclose(out.to_numpy(), a + b, rtol=1e-6, atol=1e-6)
                np.testing.assert_allclose(
                    subtract_cpu(_t(a), _t(b)).to_numpy(), a - b, rtol=1e-6, atol=1e-6
                )

    def test_add_equals_subtract_of_negation(self):
        a = self.rng.standard_normal((3, 4)).astype(np.float32)
        b = self.rng.standard_normal((4,)).astype(np.float32)
        lhs = add_cpu(_t(a), _t(b)).to_numpy()
        rhs = subtract_cpu(_t(a), neg_cpu(_t(b))).to_numpy()
        np.testing.assert_array_equal(lhs, rhs)

    def test_int_inputs_produce_float32(self):
        out = add_cpu(_t([1, 2, 3], DType.INT32), _t([10], DType.INT32))
        self.assertEqual(out.dtype, DType.FLOAT32)
        np.testing.assert_array_equal(out.to_numpy(), [11.0, 12.0, 13.0])

    def test_incompatible_shapes(self):
        with self.assertRaises(ShapeMismatchError):
            add_cpu(_t(np.zeros((2, 3))), _t(np.zeros((2,))))

    def test_generic_op_with_custom_combinator(self):
        a = _t(np.array([[1.0], [5.0]], np.float32))
        b = _t(np.array([2.0, 3.0, 7.0], np.float32))
        out = broadcasted_binary_op(a, b, DType.FLOAT32, max)
        np.testing.assert_array_equal(out.to_numpy(), [[2, 3, 7], [5, 5, 7]])

    def test_inputs_are_not_mutated(self):
        a = np.arange(4, dtype=np.float32)
        ta = _t(a)
        add_cpu(ta, ta)
        np.testing.assert_array_equal(ta.to_numpy(), a)


class TestModuloOps(unittest.TestCase):
    def test_multiply_trailing_broadcast(self):
        a = np.arange(6, dtype=np.float32).reshape(2, 3)
        b = np.array([1.0, 2.0, 3.0], np.float32)
        out = multiply_cpu(_t(a), _t(b))
        np.testing.assert_array_equal(out.to_numpy(), a * b)

    def test_multiply_scalar(self):
        a = np.arange(6, dtype=np.float32).reshape(3, 2)
        out = multiply_cpu(_t(a), Tensor.scalar(0.5))
        np.testing.assert_array_equal(out.to_numpy(), a * 0.5)

    def test_non_trailing_broadcast_uses_general_walk(self):
        cases = [((3, 1), (1, 3)), ((2, 3), (2, 1)), ((4, 1, 2), (3, 1))]
        for sa, sb in cases:
            with self.subTest(a=sa, b=sb):
                a = np.arange(1, np.prod(sa) + 1, dtype=np.float32).reshape(sa)
                b = np.arange(2, np.prod(sb) + 2, dtype=np.float32).reshape(sb)
                np.testing.assert_allclose(
                    multiply_cpu(_t(a), _t(b)).to_numpy(), a * b, rtol=1e-6
                )
                np.testing.assert_allclose(
                    divide_cpu(_t(a), _t(b)).to_numpy(), a / b, rtol=1e-6
                )

    def test_divide_is_float32_with_ieee_zero_division(self):
        a = _t(np.array([1, -2, 0, 6], np.int32))
        b = _t(np.array([0, 0, 0, 4], np.int32))
        out = divide_cpu(a, b)
        self.assertEqual(out.dtype, DType.FLOAT32)
        vals = out.to_numpy()
        self.assertEqual(vals[0], np.inf)
        self.assertEqual(vals[1], -np.inf)
        self.assertTrue(np.isnan(vals[2]))
        self.assertEqual(vals[3], 1.5)

    def test_neg(self):
        a = np.array([[1.0, -2.0], [0.5, 0.0]], np.float32)
        np.testing.assert_array_equal(neg_cpu(_t(a)).to_numpy(), -a)


class TestEqual(unittest.TestCase):
    def test_equal_is_bool(self):
        out = equal_cpu(_t([1.0, 2.0, 3.0]), _t([1.0, 0.0, 3.0]))
        self.assertEqual(out.dtype, DType.BOOL)
        np.testing.assert_array_equal(out.to_numpy(), [1, 0, 1])

    def test_equal_broadcasts(self):
        out = equal_cpu(_t(np.array([[1, 2], [2, 1]], np.int32)), _t(np.array([2], np.int32)))
        np.testing.assert_array_equal(out.to_numpy(), [[0, 1], [1, 0]])

    def test_nan_on_either_side_yields_bool_nan(self):
        out = equal_cpu(_t([np.nan, 1.0, 1.0]), _t([np.nan, np.nan, 1.0]))
        np.testing.assert_array_equal(out.to_numpy(), [NAN_BOOL, NAN_BOOL, 1])
        np.testing.assert_array_equal(out.is_nan(), [True, True, False])

        ints = Tensor.make((2,), [NAN_INT32, 4], DType.INT32)
        out = equal_cpu(ints, Tensor.make((2,), [4, 4], DType.INT32))
        np.testing.assert_array_equal(out.to_numpy(), [NAN_BOOL, 1])


if __name__ == "__main__":
    unittest.main()
