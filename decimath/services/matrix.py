"""
Matrix engine over DecimalValue.

Every cell is a DecimalValue and every operation is composed from the exact
arithmetic core; the engine never falls back to binary floating point.

**Exactness**:
- add, subtract, scalar_multiply, multiply, transpose, trace, power: exact
- determinant: exact (cofactor expansion for small sizes, fraction-free
  Bareiss elimination beyond Settings.COFACTOR_EXPANSION_LIMIT)
- inverse, divide_elementwise: each cell rounded once to a PrecisionContext

**Text grammar**: rows separated by ';', cells by ',', whitespace ignored:
    "1, 2; 3, 4"  →  [[1, 2], [3, 4]]
Cells use the matrix locale's decimal separator; locales whose decimal
separator is ',' or ';' cannot be written in this grammar.

Dimensions are fixed at construction; cells change only through set() /
item assignment. Instances are not synchronized.
"""
from decimal import Decimal
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import structlog

from decimath.config import get_settings
from decimath.errors import (
    DimensionMismatchError,
    EmptySequenceError,
    InvalidArgumentError,
    InvalidExponentError,
    MatrixParseError,
    NotSquareError,
    NumberParseError,
    SingularMatrixError,
    )
from decimath.schemas.common import PrecisionContext
from decimath.schemas.values import DEFAULT_LOCALE, DecimalValue
from decimath.services import arithmetic
from decimath.services.locale_format import LocaleNumberFormat
from decimath.utils.decimal_utils import (
    exact_add,
    exact_divide,
    exact_multiply,
    exact_subtract,
    round_to_places,
    )
from decimath.utils.translation_utils import get_locale_separators, normalize_locale_identifier

logger = structlog.get_logger(__name__)

CellInput = Union[DecimalValue, Decimal, int, str]

ROW_SEPARATOR = ";"
CELL_SEPARATOR = ","


# ============================================================================
# EXACT DETERMINANT HELPERS (plain Decimal grids)
# ============================================================================

def _minor(grid: List[List[Decimal]], row: int, column: int) -> List[List[Decimal]]:
    return [r[:column] + r[column + 1:] for i, r in enumerate(grid) if i != row]


def _cofactor_determinant(grid: List[List[Decimal]]) -> Decimal:
    """Laplace expansion along the first row."""
    size = len(grid)
    if size == 0:
        return Decimal(1)
    if size == 1:
        return grid[0][0]
    if size == 2:
        return exact_subtract(exact_multiply(grid[0][0], grid[1][1]), exact_multiply(grid[0][1], grid[1][0]))

    total = Decimal(0)
    for column, entry in enumerate(grid[0]):
        if entry.is_zero():
            continue
        term = exact_multiply(entry, _cofactor_determinant(_minor(grid, 0, column)))
        total = exact_subtract(total, term) if column % 2 else exact_add(total, term)
    return total


def _bareiss_determinant(grid: List[List[Decimal]]) -> Decimal:
    """
    Fraction-free Gaussian elimination.

    After step k every remaining entry is a (k+1)x(k+1) minor of the input,
    so each division by the previous pivot is exact.
    """
    size = len(grid)
    work = [row[:] for row in grid]
    negate = False
    previous_pivot = Decimal(1)

    for k in range(size - 1):
        if work[k][k].is_zero():
            swap = next((i for i in range(k + 1, size) if not work[i][k].is_zero()), None)
            if swap is None:
                return Decimal(0)
            work[k], work[swap] = work[swap], work[k]
            negate = not negate

        pivot = work[k][k]
        for i in range(k + 1, size):
            for j in range(k + 1, size):
                numerator = exact_subtract(
                    exact_multiply(work[i][j], pivot),
                    exact_multiply(work[i][k], work[k][j]),
                    )
                work[i][j] = exact_divide(numerator, previous_pivot)
        previous_pivot = pivot

    determinant = work[size - 1][size - 1]
    return -determinant if negate else determinant


def _exact_determinant(grid: List[List[Decimal]], cofactor_limit: int) -> Decimal:
    if len(grid) <= max(cofactor_limit, 2):
        return _cofactor_determinant(grid)
    return _bareiss_determinant(grid)


# ============================================================================
# MATRIX
# ============================================================================

class Matrix:
    """
    Fixed-shape matrix of DecimalValue cells (row-major).

    Args:
        rows: Number of rows (0 <= rows <= Settings.MAX_MATRIX_DIMENSION)
        columns: Number of columns (same bounds)
        locale: Locale of the cells (default en_US)

    Examples:
        >>> m = Matrix.parse("1, 2; 3, 4")
        >>> m.determinant()
        DecimalValue('-2', locale='en_US')
        >>> m.transpose().to_grammar_string()
        '1,3;2,4'
    """

    def __init__(self, rows: int, columns: int, locale: Optional[str] = None):
        self._rows = self._validate_dimension(rows, "rows")
        self._columns = self._validate_dimension(columns, "columns")
        self._locale = normalize_locale_identifier(locale or DEFAULT_LOCALE)
        zero = DecimalValue.zero(locale=self._locale)
        self._cells: List[List[DecimalValue]] = [[zero] * self._columns for _ in range(self._rows)]

    @staticmethod
    def _validate_dimension(value: int, name: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgumentError(f"Matrix {name} must be an integer, got {value!r}")
        if value < 0:
            raise InvalidArgumentError(f"Matrix {name} must be non-negative, got {value}")
        limit = get_settings().MAX_MATRIX_DIMENSION
        if value > limit:
            raise InvalidArgumentError(f"Matrix {name} must not exceed {limit}, got {value}")
        return value

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def from_rows(cls, grid: Sequence[Sequence[CellInput]], locale: Optional[str] = None) -> 'Matrix':
        """
        Build a matrix from a nested grid; dimensions are inferred.

        Raises:
            DimensionMismatchError: If the rows have different lengths
        """
        grid = [list(row) for row in grid]
        columns = len(grid[0]) if grid else 0
        if any(len(row) != columns for row in grid):
            raise DimensionMismatchError(f"Ragged grid: row lengths {[len(row) for row in grid]}")

        matrix = cls(len(grid), columns, locale)
        matrix._cells = [[matrix._coerce(cell) for cell in row] for row in grid]
        return matrix

    @classmethod
    def parse(cls, text: str, locale: Optional[str] = None) -> 'Matrix':
        """
        Parse "a, b; c, d" text with cells in `locale`.

        Raises:
            MatrixParseError: Empty text, ragged rows, empty or unparsable cells,
                              or a locale whose decimal separator clashes with the grammar
        """
        locale = normalize_locale_identifier(locale or DEFAULT_LOCALE)
        decimal_separator = get_locale_separators(locale).decimal
        if decimal_separator in (ROW_SEPARATOR, CELL_SEPARATOR):
            raise MatrixParseError(
                f"Locale {locale} uses '{decimal_separator}' as decimal separator, "
                f"which the matrix grammar reserves"
                )
        if not isinstance(text, str) or not text.strip():
            raise MatrixParseError("Matrix text is empty")

        number_format = LocaleNumberFormat(default_locale=locale)
        grid = []
        for row_index, row_text in enumerate(text.split(ROW_SEPARATOR)):
            row = []
            for column_index, cell_text in enumerate(row_text.split(CELL_SEPARATOR)):
                if not cell_text.strip():
                    raise MatrixParseError(f"Empty cell at row {row_index}, column {column_index}")
                try:
                    row.append(number_format.parse(cell_text))
                except NumberParseError as e:
                    raise MatrixParseError(
                        f"Invalid cell at row {row_index}, column {column_index}: {cell_text.strip()!r}"
                        ) from e
            grid.append(row)

        if any(len(row) != len(grid[0]) for row in grid):
            raise MatrixParseError(f"Ragged matrix text: row lengths {[len(row) for row in grid]}")

        return cls.from_rows(grid, locale)

    @classmethod
    def identity(cls, size: int, locale: Optional[str] = None) -> 'Matrix':
        """Square identity matrix of the given size."""
        matrix = cls(size, size, locale)
        one = DecimalValue.one(locale=matrix.locale)
        for i in range(size):
            matrix._cells[i][i] = one
        return matrix

    def _coerce(self, value: CellInput) -> DecimalValue:
        if isinstance(value, DecimalValue):
            return value
        return DecimalValue.of(value, locale=self._locale)

    def _like(self, cells: List[List[DecimalValue]], rows: int, columns: int) -> 'Matrix':
        # shape derives from validated matrices: skip the settings lookup of __init__
        matrix = Matrix.__new__(Matrix)
        matrix._rows = rows
        matrix._columns = columns
        matrix._locale = self._locale
        matrix._cells = cells
        return matrix

    # =========================================================================
    # SHAPE AND CELL ACCESS
    # =========================================================================

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def shape(self) -> Tuple[int, int]:
        return self._rows, self._columns

    @property
    def locale(self) -> str:
        return self._locale

    def _check_index(self, row: int, column: int) -> None:
        if not 0 <= row < self._rows:
            raise IndexError(f"Row index out of bounds: {row} (rows={self._rows})")
        if not 0 <= column < self._columns:
            raise IndexError(f"Column index out of bounds: {column} (columns={self._columns})")

    def get(self, row: int, column: int) -> DecimalValue:
        """Cell at (row, column), zero-based."""
        self._check_index(row, column)
        return self._cells[row][column]

    def set(self, row: int, column: int, value: CellInput) -> None:
        """Replace the cell at (row, column)."""
        self._check_index(row, column)
        self._cells[row][column] = self._coerce(value)

    def __getitem__(self, key: Tuple[int, int]) -> DecimalValue:
        row, column = key
        return self.get(row, column)

    def __setitem__(self, key: Tuple[int, int], value: CellInput) -> None:
        row, column = key
        self.set(row, column, value)

    def __iter__(self) -> Iterator[DecimalValue]:
        """Cells in row-major order."""
        for row in self._cells:
            yield from row

    def to_rows(self) -> List[List[DecimalValue]]:
        """Copy of the cells as a list of rows."""
        return [row[:] for row in self._cells]

    def _decimal_grid(self) -> List[List[Decimal]]:
        return [[cell.to_decimal() for cell in row] for row in self._cells]

    # =========================================================================
    # ELEMENTWISE OPERATIONS
    # =========================================================================

    def _require_same_shape(self, other: 'Matrix', operation: str) -> None:
        if self.shape != other.shape:
            logger.debug("Matrix shape mismatch", operation=operation, left=self.shape, right=other.shape)
            raise DimensionMismatchError(
                f"Cannot {operation} {self._rows}x{self._columns} and {other.rows}x{other.columns} matrices"
                )

    def _combine(self, other: 'Matrix', operation) -> 'Matrix':
        cells = [
            [operation(a, b) for a, b in zip(left_row, right_row)]
            for left_row, right_row in zip(self._cells, other._cells)
            ]
        return self._like(cells, self._rows, self._columns)

    def add(self, other: 'Matrix') -> 'Matrix':
        """Cellwise sum."""
        self._require_same_shape(other, "add")
        return self._combine(other, arithmetic.add)

    def subtract(self, other: 'Matrix') -> 'Matrix':
        """Cellwise difference."""
        self._require_same_shape(other, "subtract")
        return self._combine(other, arithmetic.subtract)

    def divide_elementwise(self, other: 'Matrix', ctx: Optional[PrecisionContext] = None) -> 'Matrix':
        """
        Cellwise quotient, each cell rounded to `ctx`.

        Raises:
            DimensionMismatchError: Different shapes
            DivisionByZeroError: A cell of `other` is zero
        """
        self._require_same_shape(other, "divide")
        return self._combine(other, lambda a, b: arithmetic.divide(a, b, ctx))

    def scalar_multiply(self, scalar: CellInput) -> 'Matrix':
        """Every cell multiplied by `scalar`."""
        scalar = self._coerce(scalar)
        cells = [[arithmetic.multiply(cell, scalar) for cell in row] for row in self._cells]
        return self._like(cells, self._rows, self._columns)

    def transpose(self) -> 'Matrix':
        cells = [[self._cells[i][j] for i in range(self._rows)] for j in range(self._columns)]
        return self._like(cells, self._columns, self._rows)

    def round(self, places: int, ctx: Optional[PrecisionContext] = None) -> 'Matrix':
        """Every cell rounded to `places` fraction digits (rounding policy from `ctx`)."""
        rounding = (ctx or PrecisionContext()).rounding.decimal_rounding
        cells = [
            [DecimalValue.from_decimal(round_to_places(cell.to_decimal(), places, rounding),
                                       locale=cell.locale, precision=cell.precision) for cell in row]
            for row in self._cells
            ]
        return self._like(cells, self._rows, self._columns)

    # =========================================================================
    # MATRIX PRODUCT AND POWER
    # =========================================================================

    def multiply(self, other: 'Matrix') -> 'Matrix':
        """
        Matrix product (exact).

        Raises:
            DimensionMismatchError: If self.columns != other.rows
        """
        if self._columns != other.rows:
            logger.debug("Matrix product shape mismatch", left=self.shape, right=other.shape)
            raise DimensionMismatchError(
                f"Cannot multiply {self._rows}x{self._columns} by {other.rows}x{other.columns}: "
                f"inner dimensions differ"
                )

        left = self._decimal_grid()
        right = other._decimal_grid()
        cells = []
        for i in range(self._rows):
            row = []
            for j in range(other.columns):
                total = Decimal(0)
                for k in range(self._columns):
                    total = exact_add(total, exact_multiply(left[i][k], right[k][j]))
                row.append(DecimalValue.from_decimal(total, locale=self._locale))
            cells.append(row)
        return self._like(cells, self._rows, other.columns)

    def power(self, exponent: Union[int, DecimalValue]) -> 'Matrix':
        """
        Repeated product by binary exponentiation; exponent 0 gives the identity.

        Raises:
            NotSquareError: Non-square matrix
            InvalidExponentError: Negative or non-integer exponent
        """
        self._require_square("power")
        if isinstance(exponent, DecimalValue):
            if not exponent.is_integer():
                raise InvalidExponentError(f"Matrix exponent must be an integer, got {exponent}")
            exponent = int(exponent.to_decimal())
        if isinstance(exponent, bool) or not isinstance(exponent, int):
            raise InvalidExponentError(f"Matrix exponent must be an integer, got {exponent!r}")
        if exponent < 0:
            raise InvalidExponentError(f"Matrix exponent must be non-negative, got {exponent}")

        result = Matrix.identity(self._rows, self._locale)
        base = self
        while exponent:
            if exponent & 1:
                result = result.multiply(base)
            exponent >>= 1
            if exponent:
                base = base.multiply(base)
        return result

    # =========================================================================
    # SQUARE-MATRIX OPERATIONS
    # =========================================================================

    def _require_square(self, operation: str) -> None:
        if not self.is_square():
            raise NotSquareError(f"{operation} requires a square matrix, got {self._rows}x{self._columns}")

    def _exact_determinant(self) -> Decimal:
        return _exact_determinant(self._decimal_grid(), get_settings().COFACTOR_EXPANSION_LIMIT)

    def determinant(self, ctx: Optional[PrecisionContext] = None) -> DecimalValue:
        """
        Exact determinant (0x0 → 1), optionally rounded to `ctx` significant digits.

        Raises:
            NotSquareError: Non-square matrix
        """
        self._require_square("determinant")
        value = self._exact_determinant()
        if ctx is not None:
            value = ctx.to_context().plus(value)
        return DecimalValue.from_decimal(value, locale=self._locale, precision=ctx)

    def inverse(self, ctx: Optional[PrecisionContext] = None) -> 'Matrix':
        """
        Inverse as adjugate / determinant; each cell is rounded once to `ctx`.

        Raises:
            NotSquareError: Non-square matrix
            SingularMatrixError: Determinant is zero
        """
        self._require_square("inverse")
        grid = self._decimal_grid()
        limit = get_settings().COFACTOR_EXPANSION_LIMIT
        determinant = _exact_determinant(grid, limit)
        if determinant.is_zero():
            logger.debug("Singular matrix rejected", shape=self.shape)
            raise SingularMatrixError(f"Matrix is singular (determinant 0), shape {self._rows}x{self._columns}")

        precision = ctx or PrecisionContext()
        context = precision.to_context()
        size = self._rows
        cells = [[None] * size for _ in range(size)]
        for i in range(size):
            for j in range(size):
                cofactor = _exact_determinant(_minor(grid, i, j), limit)
                if (i + j) % 2:
                    cofactor = -cofactor
                # adjugate is the transposed cofactor matrix
                cells[j][i] = DecimalValue.from_decimal(
                    context.divide(cofactor, determinant), locale=self._locale, precision=precision
                    )
        return self._like(cells, size, size)

    def trace(self) -> DecimalValue:
        """Sum of the main diagonal."""
        self._require_square("trace")
        total = DecimalValue.zero(locale=self._locale)
        for i in range(self._rows):
            total = arithmetic.add(total, self._cells[i][i])
        return total

    # =========================================================================
    # PREDICATES AND AGGREGATES
    # =========================================================================

    def is_square(self) -> bool:
        return self._rows == self._columns

    def is_zero_matrix(self) -> bool:
        return all(cell.is_zero() for cell in self)

    def is_identity_matrix(self) -> bool:
        if not self.is_square():
            return False
        one = Decimal(1)
        return all(
            self._cells[i][j].to_decimal() == (one if i == j else 0)
            for i in range(self._rows) for j in range(self._columns)
            )

    def is_symmetric(self) -> bool:
        if not self.is_square():
            return False
        return all(
            self._cells[i][j] == self._cells[j][i]
            for i in range(self._rows) for j in range(i + 1, self._columns)
            )

    def sum_elements(self) -> DecimalValue:
        """Exact sum of all cells (zero for an empty matrix)."""
        total = DecimalValue.zero(locale=self._locale)
        for cell in self:
            total = arithmetic.add(total, cell)
        return total

    def max(self) -> DecimalValue:
        """
        Largest cell.

        Raises:
            EmptySequenceError: If the matrix has no cells
        """
        cells = list(self)
        if not cells:
            raise EmptySequenceError("Cannot take the maximum of an empty matrix")
        largest = cells[0]
        for cell in cells[1:]:
            largest = arithmetic.maximum(largest, cell)
        return largest

    # =========================================================================
    # TEXT AND EQUALITY
    # =========================================================================

    def to_grammar_string(self) -> str:
        """Render in the parse() grammar (no grouping, locale decimal separator)."""
        decimal_separator = get_locale_separators(self._locale).decimal
        return ROW_SEPARATOR.join(
            CELL_SEPARATOR.join(cell.canonical().replace(".", decimal_separator) for cell in row)
            for row in self._cells
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and all(a == b for a, b in zip(self, other))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Matrix({self._rows}x{self._columns}, '{self.to_grammar_string()}', locale='{self._locale}')"

    def __str__(self) -> str:
        return "\n".join("[" + ", ".join(str(cell) for cell in row) + "]" for row in self._cells)
