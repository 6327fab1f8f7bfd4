from ._tensor import STORAGE_DTYPES, Tensor, storage_dtype

__all__ = [Tensor.__name__, storage_dtype.__name__, "STORAGE_DTYPES"]
