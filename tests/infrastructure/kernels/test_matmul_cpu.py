import unittest

import numpy as np

from src.kernelforge.domain._dtype import DType
from src.kernelforge.domain._errors import ShapeMismatchError
from src.kernelforge.infrastructure.ops.matmul_cpu import MatrixOrientation, mat_mul_cpu
from src.kernelforge.infrastructure.tensor import Tensor

R = MatrixOrientation.REGULAR
T = MatrixOrientation.TRANSPOSED


class TestMatMulCPU(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(7)
        self.a = rng.standard_normal((3, 4)).astype(np.float32)
        self.b = rng.standard_normal((4, 5)).astype(np.float32)

    def test_regular(self):
        out = mat_mul_cpu(Tensor.from_numpy(self.a), Tensor.from_numpy(self.b))
        self.assertEqual(out.shape, (3, 5))
        self.assertEqual(out.dtype, DType.FLOAT32)
        np.testing.assert_allclose(out.to_numpy(), self.a @ self.b, rtol=1e-5, atol=1e-6)

    def test_orientations(self):
        a_t = np.ascontiguousarray(self.a.T)
        b_t = np.ascontiguousarray(self.b.T)
        cases = [
            (a_t, self.b, T, R),
            (self.a, b_t, R, T),
            (a_t, b_t, T, T),
        ]
        for a, b, ao, bo in cases:
            with self.subTest(a_orientation=ao, b_orientation=bo):
                out = mat_mul_cpu(Tensor.from_numpy(a), Tensor.from_numpy(b), ao, bo)
                np.testing.assert_allclose(
                    out.to_numpy(), self.a @ self.b, rtol=1e-5, atol=1e-6
                )

    def test_orientation_accepts_string_values(self):
        a_t = np.ascontiguousarray(self.a.T)
        out = mat_mul_cpu(Tensor.from_numpy(a_t), Tensor.from_numpy(self.b), "transposed")
        np.testing.assert_allclose(out.to_numpy(), self.a @ self.b, rtol=1e-5, atol=1e-6)

    def test_identity(self):
        eye = Tensor.from_numpy(np.eye(4, dtype=np.float32))
        out = mat_mul_cpu(Tensor.from_numpy(self.a), eye)
        np.testing.assert_array_equal(out.to_numpy(), self.a)

    def test_shape_errors(self):
        with self.assertRaises(ShapeMismatchError):
            mat_mul_cpu(Tensor.from_numpy(self.a), Tensor.from_numpy(self.a))
        with self.assertRaises(ShapeMismatchError):
            mat_mul_cpu(Tensor.from_numpy(self.a.reshape(12)), Tensor.from_numpy(self.b))


if __name__ == "__main__":
    unittest.main()
