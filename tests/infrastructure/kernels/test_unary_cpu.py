import unittest

import numpy as np

from src.kernelforge.domain._dtype import NAN_BOOL, NAN_INT32, DType
from src.kernelforge.infrastructure.ops import unary_cpu
from src.kernelforge.infrastructure.ops.unary_cpu import SELU_SCALE, SELU_SCALE_ALPHA
from src.kernelforge.infrastructure.tensor import Tensor


class TestFloatUnaryKernels(unittest.TestCase):
    def setUp(self):
        self.x = np.array([-2.0, -0.5, 0.0, 0.25, 1.5, 3.0], dtype=np.float32)
        self.t = Tensor.from_numpy(self.x)

    def test_against_numpy(self):
        x64 = self.x.astype(np.float64)
        cases = {
            "ceil_cpu": np.ceil(x64),
            "floor_cpu": np.floor(x64),
            "exp_cpu": np.exp(x64),
            "square_cpu": x64 * x64,
            "abs_cpu": np.abs(x64),
            "sigmoid_cpu": 1.0 / (1.0 + np.exp(-x64)),
            "sin_cpu": np.sin(x64),
            "cos_cpu": np.cos(x64),
            "tan_cpu": np.tan(x64),
            "atan_cpu": np.arctan(x64),
            "sinh_cpu": np.sinh(x64),
            "cosh_cpu": np.cosh(x64),
            "tanh_cpu": np.tanh(x64),
        }
        for name, expected in cases.items():
            with self.subTest(kernel=name):
                out = getattr(unary_cpu, name)(self.t)
                self.assertEqual(out.dtype, DType.FLOAT32)
                self.assertEqual(out.shape, self.t.shape)
                np.testing.assert_allclose(
                    out.to_numpy(), expected.astype(np.float32), rtol=1e-6, atol=1e-7
                )

    def test_domain_errors_become_nan_without_warnings(self):
        t = Tensor.from_numpy(np.array([-1.0, 0.0, 4.0, 2.0], np.float32))
        with np.errstate(all="raise"):
            log = unary_cpu.log_cpu(t).to_numpy()
            sqrt = unary_cpu.sqrt_cpu(t).to_numpy()
            asin = unary_cpu.asin_cpu(t).to_numpy()
            acos = unary_cpu.acos_cpu(t).to_numpy()
        self.assertTrue(np.isnan(log[0]))
        self.assertEqual(log[1], -np.inf)
        self.assertTrue(np.isnan(sqrt[0]))
        self.assertEqual(sqrt[2], 2.0)
        self.assertTrue(np.isnan(asin[2]))
        self.assertTrue(np.isnan(acos[3]))
        self.assertAlmostEqual(float(asin[1]), 0.0)

    def test_nan_propagates(self):
        t = Tensor.from_numpy(np.array([np.nan], np.float32))
        for name in ("exp_cpu", "sigmoid_cpu", "elu_cpu", "selu_cpu", "clip_cpu"):
            with self.subTest(kernel=name):
                fn = getattr(unary_cpu, name)
                out = fn(t, 0.0, 1.0) if name == "clip_cpu" else fn(t)
                self.assertTrue(np.isnan(out.to_numpy()[0]))

    def test_int_input_gives_float32(self):
        out = unary_cpu.square_cpu(Tensor.make((2,), [3, -4], DType.INT32))
        self.assertEqual(out.dtype, DType.FLOAT32)
        np.testing.assert_array_equal(out.to_numpy(), [9.0, 16.0])


class TestActivationKernels(unittest.TestCase):
    def setUp(self):
        self.x = np.array([-2.0, -0.5, 0.0, 0.5, 2.0], dtype=np.float32)
        self.t = Tensor.from_numpy(self.x)
        self.x64 = self.x.astype(np.float64)

    def test_elu_and_derivative(self):
        expected = np.where(self.x64 >= 0, self.x64, np.exp(self.x64) - 1.0)
        np.testing.assert_allclose(unary_cpu.elu_cpu(self.t).to_numpy(), expected, rtol=1e-6)

        der = np.where(self.x64 >= 0, 1.0, np.exp(self.x64))
        np.testing.assert_allclose(unary_cpu.elu_der_cpu(self.t).to_numpy(), der, rtol=1e-6)

    def test_selu(self):
        expected = np.where(
            self.x64 >= 0, SELU_SCALE * self.x64, SELU_SCALE_ALPHA * (np.exp(self.x64) - 1.0)
        )
        np.testing.assert_allclose(unary_cpu.selu_cpu(self.t).to_numpy(), expected, rtol=1e-6)
        self.assertAlmostEqual(SELU_SCALE, 1.0507009873554805)
        self.assertAlmostEqual(SELU_SCALE_ALPHA, 1.7580993408473769)

    def test_leaky_relu(self):
        out = unary_cpu.leaky_relu_cpu(self.t, 0.1).to_numpy()
        np.testing.assert_allclose(out, [-0.2, -0.05, 0.0, 0.5, 2.0], rtol=1e-6)

    def test_clip(self):
        out = unary_cpu.clip_cpu(self.t, -1.0, 1.0).to_numpy()
        np.testing.assert_array_equal(out, [-1.0, -0.5, 0.0, 0.5, 1.0])

    def test_step(self):
        t = Tensor.from_numpy(np.array([-3.0, 0.0, 2.0, np.nan], np.float32))
        out = unary_cpu.step_cpu(t, 0.25).to_numpy()
        np.testing.assert_array_equal(out[:3], [0.25, 0.0, 1.0])
        self.assertTrue(np.isnan(out[3]))

        self.assertEqual(unary_cpu.step_cpu(t).to_numpy()[0], 0.0)


class TestRelu(unittest.TestCase):
    def test_float(self):
        t = Tensor.from_numpy(np.array([-1.0, 0.0, 2.0, np.nan], np.float32))
        out = unary_cpu.relu_cpu(t)
        self.assertEqual(out.dtype, DType.FLOAT32)
        np.testing.assert_array_equal(out.to_numpy()[:3], [0.0, 0.0, 2.0])
        self.assertTrue(np.isnan(out.to_numpy()[3]))

    def test_int_preserves_dtype_and_sentinel(self):
        t = Tensor.make((3,), [-5, 7, NAN_INT32], DType.INT32)
        out = unary_cpu.relu_cpu(t)
        self.assertEqual(out.dtype, DType.INT32)
        np.testing.assert_array_equal(out.to_numpy(), [0, 7, NAN_INT32])

    def test_bool_preserves_sentinel(self):
        t = Tensor.make((3,), [0, 1, NAN_BOOL], DType.BOOL)
        out = unary_cpu.relu_cpu(t)
        self.assertEqual(out.dtype, DType.BOOL)
        np.testing.assert_array_equal(out.to_numpy(), [0, 1, NAN_BOOL])


if __name__ == "__main__":
    unittest.main()
