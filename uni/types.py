"""Runtime values for Uni.

Uni values form a closed set. Scalars use the matching Python types;
arrays and maps are wrapped so that they behave as shared, mutable
containers; functions are their declaration nodes; `None` is the "no
value" result of operations that have nothing to produce.

    kind        Python representation
    ----        ---------------------
    nil         None
    bool        bool
    int         int (kept in the signed 64-bit range)
    float       float
    string      str
    array       ArrayVal
    map         MapVal
    function    FuncDecl

Values print in their shortest form, with containers space-separated:
`true`, `3`, `1.5`, `1e+06`, `[1 2 3]`, `map[a:1 b:2]`,
`<nil>`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Tuple
import math

from .ast import FuncDecl
from .errors import RuntimeFault


NIL = 'nil'
BOOL = 'bool'
INT = 'int'
FLOAT = 'float'
STRING = 'string'
ARRAY = 'array'
MAP = 'map'
FUNCTION = 'function'

SCALAR_KINDS = (BOOL, INT, FLOAT, STRING)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


@dataclass(eq=False)
class ArrayVal:
    """A Uni array. Assignment shares the same object, so mutation is visible through every alias."""
    items: List[Any] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Array({self.items!r})"


@dataclass(eq=False)
class MapVal:
    """A Uni map.

    Keys are compared by kind and value, so `1`, `1.0` and `true` are
    three distinct keys even though Python considers them equal. Entries
    are stored under `map_key(key)` together with the original key and
    keep insertion order.
    """
    entries: Dict[Tuple[str, Any], Tuple[Any, Any]] = field(default_factory=dict)

    def get(self, key: Any) -> Any:
        entry = self.entries.get(map_key(key))
        return entry[1] if entry is not None else None

    def set(self, key: Any, value: Any):
        self.entries[map_key(key)] = (key, value)

    def items(self) -> Iterator[Tuple[Any, Any]]:
        return iter(list(self.entries.values()))

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"Map({dict(self.entries.values())!r})"


def type_name(value: Any) -> str:
    """Return the Uni kind of a runtime value."""
    if value is None:
        return NIL
    # bool is a subclass of int; check it first
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, int):
        return INT
    if isinstance(value, float):
        return FLOAT
    if isinstance(value, str):
        return STRING
    if isinstance(value, ArrayVal):
        return ARRAY
    if isinstance(value, MapVal):
        return MAP
    if isinstance(value, FuncDecl):
        return FUNCTION
    raise TypeError(f"not a Uni value: {value!r}")


def map_key(value: Any) -> Tuple[str, Any]:
    kind = type_name(value)
    if kind not in SCALAR_KINDS:
        raise RuntimeFault('TypeError', f'{kind} cannot be used as a map key')
    return (kind, value)


###############################################################################
# Integer arithmetic
###############################################################################


def wrap_int64(n: int) -> int:
    """Wrap an integer into the signed 64-bit range, as int64 overflow does."""
    return ((n - INT64_MIN) % (1 << 64)) + INT64_MIN


def truncate_divide(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    if b == 0:
        raise RuntimeFault('ZeroDivisionError', 'integer divide by zero')
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return wrap_int64(q)


def float_divide(a: float, b: float) -> float:
    """IEEE 754 division; Python raises on a zero divisor instead."""
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


###############################################################################
# Formatting
###############################################################################


def format_float(x: float) -> str:
    """Format a float with the shortest round-tripping digits, in exponent form at or above 1e6 and below 1e-4."""
    if math.isnan(x):
        return 'NaN'
    if math.isinf(x):
        return '+Inf' if x > 0 else '-Inf'
    d = Decimal(repr(x))
    exponent = d.adjusted()
    if -4 <= exponent < 6:
        text = format(d, 'f')
        if '.' in text:
            text = text.rstrip('0').rstrip('.')
        return text
    mantissa, exp = format(d.normalize(), 'e').split('e')
    sign, digits = exp[0], exp[1:]
    return f"{mantissa}e{sign}{digits.zfill(2)}"


_KEY_ORDER = {BOOL: 0, INT: 1, FLOAT: 1, STRING: 2}


def to_string(value: Any) -> str:
    """Convert a Uni value to its printed representation."""
    kind = type_name(value)
    if kind == NIL:
        return '<nil>'
    if kind == BOOL:
        return 'true' if value else 'false'
    if kind == INT:
        return str(value)
    if kind == FLOAT:
        return format_float(value)
    if kind == STRING:
        return value
    if kind == ARRAY:
        return '[' + ' '.join(to_string(item) for item in value.items) + ']'
    if kind == MAP:
        # map entries print sorted by key
        pairs = sorted(value.items(), key=lambda kv: (_KEY_ORDER[type_name(kv[0])], kv[0]))
        return 'map[' + ' '.join(f"{to_string(k)}:{to_string(v)}" for k, v in pairs) + ']'
    return f"<fn {value.name}>"


def format_print_args(values: List[Any], newline: bool) -> str:
    """Join printed values for print and println.

    Println separates every operand with a space and appends a newline.
    Print adds a space only between two operands that are both
    non-strings.
    """
    if newline:
        return ' '.join(to_string(v) for v in values) + '\n'
    parts: List[str] = []
    prev_string = False
    for i, value in enumerate(values):
        is_string = isinstance(value, str)
        if i > 0 and not is_string and not prev_string:
            parts.append(' ')
        parts.append(to_string(value))
        prev_string = is_string
    return ''.join(parts)
