"""Dense matrix abstraction backing the training kernel.

Two types share one storage model:

* :class:`Matrix` owns a contiguous row-major ``float64`` buffer and exposes
  every in-place operation. Operations always write into ``self`` and read
  their operands, so callers allocate destinations once and reuse them.
* :class:`MatrixView` is a read-only window over a buffer. Transposition and
  column slicing produce views in O(1) without copying; mutations of the owner
  are visible through every view of it.

Operands are checked for shape compatibility before any write, so a failed
call never leaves a destination partially updated.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

import numpy as np

from .errors import AliasingError, DimensionMismatch, OutOfRange
from .types import Array

UnaryFn = Callable[[Array], Array]
BinaryFn = Callable[[Array, Array], Array]

_ROW_WORKERS = max(1, min(8, os.cpu_count() or 1))
_POOL: ThreadPoolExecutor | None = None


def _row_pool() -> ThreadPoolExecutor:
    global _POOL
    if _POOL is None:
        _POOL = ThreadPoolExecutor(
            max_workers=_ROW_WORKERS, thread_name_prefix="neuralnet-rowsum"
        )
    return _POOL


class MatrixView:
    """Read-only (possibly transposed) window over a matrix buffer."""

    __slots__ = ("_data", "_transposed")

    def __init__(self, data: Array, *, transposed: bool = False) -> None:
        if data.ndim != 2:
            raise DimensionMismatch(f"Matrices are two-dimensional, got shape {data.shape}")
        readonly = data.view()
        readonly.flags.writeable = False
        self._data = readonly
        self._transposed = transposed

    # ------------------------------------------------------------------
    # Read access

    @property
    def is_transposed(self) -> bool:
        return self._transposed

    @property
    def rows(self) -> int:
        return int(self._data.shape[0])

    @property
    def cols(self) -> int:
        return int(self._data.shape[1])

    @property
    def values(self) -> Array:
        """Read-only array over the entries; no copy is made."""

        return self._data

    def dims(self) -> tuple[int, int]:
        """Return ``(rows, columns)``."""

        return self.rows, self.cols

    def at(self, row: int, column: int) -> float:
        rows, cols = self.dims()
        if not (0 <= row < rows and 0 <= column < cols):
            raise OutOfRange(f"Index ({row}, {column}) outside a {rows}x{cols} matrix")
        return float(self._data[row, column])

    def view(self) -> "MatrixView":
        return self

    def transpose(self) -> "MatrixView":
        """Return the transposed view; storage is shared, nothing is copied."""

        return MatrixView(self._data.T, transposed=not self._transposed)

    def columns(self, start: int, stop: int) -> "MatrixView":
        """Return a view over the column range ``[start, stop)``."""

        cols = self.cols
        if not (0 <= start < cols) or not (start < stop <= cols):
            raise OutOfRange(f"Column range [{start}, {stop}) outside [0, {cols})")
        return MatrixView(self._data[:, start:stop], transposed=self._transposed)

    def frobenius_norm_squared(self) -> float:
        """Sum of squared entries."""

        return float(np.sum(np.square(self._data)))

    def to_numpy(self) -> Array:
        """Return a writable copy of the entries."""

        return np.array(self._data, dtype=np.float64, copy=True)

    def shares_storage(self, other: "MatrixView") -> bool:
        return bool(np.may_share_memory(self._data, other._data))

    def __repr__(self) -> str:
        kind = "transposed view" if self._transposed else "view"
        rows, cols = self.dims()
        return f"{type(self).__name__}({rows}x{cols} {kind})"


class Matrix(MatrixView):
    """Mutable matrix owning its buffer; the destination of every operation."""

    __slots__ = ("_buffer",)

    def __init__(self, data: Array) -> None:
        if data.ndim != 2:
            raise DimensionMismatch(f"Matrices are two-dimensional, got shape {data.shape}")
        buffer = np.ascontiguousarray(data, dtype=np.float64)
        if buffer is data and not buffer.flags.writeable:
            buffer = buffer.copy()
        self._buffer = buffer
        super().__init__(buffer)

    def view(self) -> MatrixView:
        return MatrixView(self._buffer)

    def set(self, row: int, column: int, value: float) -> None:
        rows, cols = self.dims()
        if not (0 <= row < rows and 0 <= column < cols):
            raise OutOfRange(f"Index ({row}, {column}) outside a {rows}x{cols} matrix")
        self._buffer[row, column] = value

    def __repr__(self) -> str:
        rows, cols = self.dims()
        return f"Matrix({rows}x{cols})"

    # ------------------------------------------------------------------
    # In-place operations

    def elementwise(self, src: MatrixView, fn: UnaryFn) -> "Matrix":
        """``self[i, j] = fn(src[i, j])``; ``fn`` is applied to the whole array."""

        self._require_same_dims("elementwise", src)
        self._reject_transposed_alias(src)
        self._buffer[...] = fn(src._data)
        return self

    def combine(self, a: MatrixView, b: MatrixView, fn: BinaryFn) -> "Matrix":
        """``self[i, j] = fn(a[i, j], b[i, j])``."""

        self._require_same_dims("combine", a, b)
        self._reject_transposed_alias(a, b)
        self._buffer[...] = fn(a._data, b._data)
        return self

    def multiply_into(self, a: MatrixView, b: MatrixView) -> "Matrix":
        """``self = a · b`` (standard matrix product)."""

        a_rows, a_cols = a.dims()
        b_rows, b_cols = b.dims()
        if a_cols != b_rows:
            raise DimensionMismatch(
                f"Cannot multiply {a_rows}x{a_cols} by {b_rows}x{b_cols}"
            )
        if self.dims() != (a_rows, b_cols):
            raise DimensionMismatch(
                f"Product is {a_rows}x{b_cols} but destination is "
                f"{self.rows}x{self.cols}"
            )
        if self.shares_storage(a) or self.shares_storage(b):
            self._buffer[...] = a._data @ b._data
        else:
            np.matmul(a._data, b._data, out=self._buffer)
        return self

    def add_column_vector(self, a: MatrixView, bias: MatrixView) -> "Matrix":
        """Broadcast-add the ``(rows x 1)`` ``bias`` across every column of ``a``."""

        self._require_same_dims("add_column_vector", a)
        if bias.dims() != (a.rows, 1):
            raise DimensionMismatch(
                f"Bias must be {a.rows}x1, got {bias.rows}x{bias.cols}"
            )
        self._reject_transposed_alias(a)
        np.add(a._data, bias._data, out=self._buffer)
        return self

    def row_sum(self, src: MatrixView, normalize: bool = False) -> "Matrix":
        """Sum each row of ``src`` into this column vector.

        Rows are split into disjoint chunks summed by the shared worker pool;
        the call returns once every chunk has been written. ``normalize``
        divides each sum by the column count.
        """

        rows, cols = src.dims()
        if self.dims() != (rows, 1):
            raise DimensionMismatch(
                f"Row sum of a {rows}x{cols} matrix needs a {rows}x1 destination, "
                f"got {self.rows}x{self.cols}"
            )
        source = src._data
        if self.shares_storage(src):
            source = source.copy()
        divisor = float(cols) if normalize else 1.0
        chunks = [c for c in np.array_split(np.arange(rows), min(rows, _ROW_WORKERS)) if c.size]

        def _sum_rows(chunk: Array) -> None:
            lo, hi = int(chunk[0]), int(chunk[-1]) + 1
            self._buffer[lo:hi, 0] = source[lo:hi].sum(axis=1) / divisor

        if len(chunks) == 1:
            _sum_rows(chunks[0])
        else:
            # Consuming the iterator joins every worker and re-raises failures.
            list(_row_pool().map(_sum_rows, chunks))
        return self

    def scale(self, factor: float) -> "Matrix":
        self._buffer *= factor
        return self

    # ------------------------------------------------------------------
    # Guards

    def _require_same_dims(self, op: str, *operands: MatrixView) -> None:
        expected = self.dims()
        for operand in operands:
            if operand.dims() != expected:
                raise DimensionMismatch(
                    f"{op}: operand is {operand.rows}x{operand.cols}, "
                    f"destination is {expected[0]}x{expected[1]}"
                )

    def _reject_transposed_alias(self, *operands: MatrixView) -> None:
        for operand in operands:
            if operand.is_transposed and self.shares_storage(operand):
                raise AliasingError(
                    "In-place elementwise update cannot read its own buffer through "
                    "a transposed view"
                )


# ----------------------------------------------------------------------
# Constructors


def _generator(rng: np.random.Generator | None) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _check_shape(rows: int, columns: int) -> None:
    if rows <= 0 or columns <= 0:
        raise DimensionMismatch(f"Matrix dimensions must be positive, got {rows}x{columns}")


def zeros(rows: int, columns: int) -> Matrix:
    _check_shape(rows, columns)
    return Matrix(np.zeros((rows, columns), dtype=np.float64))


def random(
    rows: int, columns: int, scale: float, rng: np.random.Generator | None = None
) -> Matrix:
    """Independent draws uniform over ``[0, scale)``."""

    _check_shape(rows, columns)
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")
    draws = _generator(rng).random((rows, columns)) * scale
    return Matrix(draws)


def random_unit(
    rows: int, columns: int, prob: float, rng: np.random.Generator | None = None
) -> Matrix:
    """Independent Bernoulli(``prob``) draws, every entry exactly 0 or 1."""

    _check_shape(rows, columns)
    if not 0.0 <= prob <= 1.0:
        raise ValueError(f"prob must lie in [0, 1], got {prob}")
    draws = _generator(rng).random((rows, columns)) < prob
    return Matrix(draws.astype(np.float64))


def horizontal_stack(vectors: Sequence[Sequence[float]]) -> Matrix:
    """Stack equal-length vectors as columns: column ``j`` is ``vectors[j]``."""

    if not vectors:
        raise DimensionMismatch("Cannot stack an empty sequence of vectors")
    length = len(vectors[0])
    for idx, vector in enumerate(vectors):
        if len(vector) != length:
            raise DimensionMismatch(
                f"Vector {idx} has length {len(vector)}, expected {length}"
            )
    _check_shape(length, len(vectors))
    return Matrix(np.asarray(vectors, dtype=np.float64).T)


def column_vector(values: Sequence[float]) -> Matrix:
    _check_shape(len(values), 1)
    return Matrix(np.asarray(values, dtype=np.float64).reshape(-1, 1))


def row_vector(values: Sequence[float]) -> Matrix:
    _check_shape(1, len(values))
    return Matrix(np.asarray(values, dtype=np.float64).reshape(1, -1))


def from_rows(rows: Sequence[Sequence[float]]) -> Matrix:
    array = np.asarray(rows, dtype=np.float64)
    if array.ndim != 2:
        raise DimensionMismatch("Rows must all have the same length")
    _check_shape(*array.shape)
    return Matrix(array.copy())


def from_numpy(array: Array) -> Matrix:
    """Copy a two-dimensional array into a new owned matrix."""

    array = np.asarray(array, dtype=np.float64)
    if array.ndim != 2:
        raise DimensionMismatch(f"Expected a 2-D array, got shape {array.shape}")
    _check_shape(*array.shape)
    return Matrix(array.copy())


__all__ = [
    "Matrix",
    "MatrixView",
    "column_vector",
    "from_numpy",
    "from_rows",
    "horizontal_stack",
    "random",
    "random_unit",
    "row_vector",
    "zeros",
]
