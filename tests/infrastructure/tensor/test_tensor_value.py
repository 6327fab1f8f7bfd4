import unittest
import warnings

import numpy as np

from src.kernelforge.domain._dtype import NAN_BOOL, NAN_INT32, DType
from src.kernelforge.domain._errors import ShapeMismatchError, UnsupportedDTypeError
from src.kernelforge.domain._tensor import ITensor
from src.kernelforge.infrastructure.tensor import Tensor


class TestTensorConstruction(unittest.TestCase):
    def test_make_copies_and_freezes(self):
        src = np.arange(6, dtype=np.float32)
        t = Tensor.make((2, 3), src)
        src[0] = 100.0

        self.assertEqual(t.shape, (2, 3))
        self.assertEqual(t.rank, 2)
        self.assertEqual(t.size, 6)
        self.assertEqual(t.strides, (3, 1))
        self.assertEqual(t.get(0, 0), 0.0)
        self.assertFalse(t.values().flags.writeable)
        with self.assertRaises(ValueError):
            t.values()[0] = 1.0

    def test_satisfies_protocol(self):
        self.assertIsInstance(Tensor.zeros((2,)), ITensor)

    def test_value_count_must_match_shape(self):
        with self.assertRaises(ShapeMismatchError):
            Tensor.make((2, 3), [1.0, 2.0])

    def test_dimensions_must_be_positive(self):
        with self.assertRaises(ShapeMismatchError):
            Tensor.make((2, 0), [])
        with self.assertRaises(ShapeMismatchError):
            Tensor.make((-1,), [1.0])

    def test_unknown_dtype(self):
        with self.assertRaises(ValueError):
            Tensor.make((1,), [1.0], "float16")

    def test_scalar_and_zeros(self):
        s = Tensor.scalar(3.5)
        self.assertEqual(s.shape, ())
        self.assertEqual(s.rank, 0)
        self.assertEqual(s.size, 1)
        self.assertEqual(s.get(), 3.5)

        z = Tensor.zeros((2, 2), DType.INT32)
        self.assertEqual(z.dtype, DType.INT32)
        self.assertEqual(z.values().dtype, np.int32)
        np.testing.assert_array_equal(z.to_numpy(), np.zeros((2, 2), np.int32))

    def test_storage_types(self):
        self.assertEqual(Tensor.make((1,), [1], DType.FLOAT32).values().dtype, np.float32)
        self.assertEqual(Tensor.make((1,), [1], DType.INT32).values().dtype, np.int32)
        self.assertEqual(Tensor.make((1,), [1], DType.BOOL).values().dtype, np.uint8)


class TestTensorFromNumpy(unittest.TestCase):
    def test_infers_dtype(self):
        self.assertIs(Tensor.from_numpy(np.array([True, False])).dtype, DType.BOOL)
        self.assertIs(Tensor.from_numpy(np.array([1, 2], np.int64)).dtype, DType.INT32)
        self.assertIs(Tensor.from_numpy(np.array([1.5])).dtype, DType.FLOAT32)

    def test_round_trip_shape(self):
        arr = np.arange(24, dtype=np.float32).reshape(2, 3, 4)
        t = Tensor.from_numpy(arr)
        self.assertEqual(t.shape, (2, 3, 4))
        np.testing.assert_array_equal(t.to_numpy(), arr)
        self.assertEqual(t.get(1, 2, 3), 23.0)

    def test_to_numpy_is_a_copy(self):
        t = Tensor.from_numpy(np.ones((2, 2), np.float32))
        out = t.to_numpy()
        out[0, 0] = 5.0
        self.assertEqual(t.get(0, 0), 1.0)

    def test_warns_on_int32_sentinel_collision(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            t = Tensor.from_numpy(np.array([1, NAN_INT32], dtype=np.int64))
        self.assertTrue(any(issubclass(w.category, RuntimeWarning) for w in caught))
        np.testing.assert_array_equal(t.is_nan(), [False, True])

    def test_no_warning_for_ordinary_ints(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            Tensor.from_numpy(np.array([1, 2, 3], dtype=np.int32))


class TestTensorIndexing(unittest.TestCase):
    def test_index_loc_helpers(self):
        t = Tensor.zeros((2, 3, 4))
        self.assertEqual(t.index_to_loc(23), [1, 2, 3])
        self.assertEqual(t.loc_to_index([1, 0, 2]), 14)

    def test_expect_rank(self):
        t = Tensor.zeros((2, 3))
        self.assertIs(t.expect_rank(2), t)
        with self.assertRaises(ShapeMismatchError):
            t.expect_rank(3, "x")

    def test_nan_mask_per_dtype(self):
        f = Tensor.make((3,), [1.0, np.nan, 0.0])
        np.testing.assert_array_equal(f.is_nan(), [False, True, False])

        i = Tensor.make((2,), [NAN_INT32, 0], DType.INT32)
        np.testing.assert_array_equal(i.is_nan(), [True, False])

        b = Tensor.make((2,), [NAN_BOOL, 1], DType.BOOL)
        np.testing.assert_array_equal(b.is_nan(), [True, False])

    def test_get_returns_python_scalars(self):
        self.assertIsInstance(Tensor.make((1,), [2], DType.INT32).get(0), int)
        self.assertIsInstance(Tensor.make((1,), [2.0]).get(0), float)

    def test_repr(self):
        self.assertEqual(repr(Tensor.zeros((2,), DType.BOOL)), "Tensor(shape=(2,), dtype=bool)")


class TestStorageDType(unittest.TestCase):
    def test_unsupported(self):
        from src.kernelforge.infrastructure.tensor import storage_dtype

        with self.assertRaises(UnsupportedDTypeError):
            storage_dtype("float32")


if __name__ == "__main__":
    unittest.main()
