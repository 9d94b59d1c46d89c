import math
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from treelox.language.lox_callable import LoxCallable

LoxLiteral = Union[str, float]
LoxPrimitive = Union[float, str, bool, None]
LoxObject = Union[LoxPrimitive, "LoxCallable"]


def lox_is_digit(char: Optional[str]) -> bool:
    if char is None:
        return False
    return "0" <= char <= "9"


def lox_is_valid_identifier_start(char: Optional[str]) -> bool:
    if char is None:
        return False
    return ("a" <= char <= "z") or ("A" <= char <= "Z") or char == "_"


def lox_is_valid_identifier_name(char: Optional[str]) -> bool:
    if char is None:
        return False
    return lox_is_valid_identifier_start(char) or lox_is_digit(char)


def _positional_digits(number: float) -> str:
    """The shortest digits that round-trip to `number`, never in exponent notation."""
    return format(Decimal(repr(number)), "f")


def lox_number_to_str(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    string = _positional_digits(number)
    if string.endswith(".0"):
        string = string[:-2]  # Output 100.0 as 100, etc.
    return string


def lox_number_literal_to_str(number: float) -> str:
    """Number literals as `tokenize` shows them: integral values keep a trailing `.0`."""
    if not math.isfinite(number):
        return lox_number_to_str(number)
    string = _positional_digits(number)
    if "." not in string:
        string += ".0"
    return string


def lox_object_to_str(obj: LoxObject) -> str:
    """Represent a Lox object as a string."""
    if obj is None:
        return "nil"  # The null type is "nil" in Lox.
    if isinstance(obj, bool):  # Checked before float: bool is not a number in Lox.
        return "true" if obj else "false"
    if isinstance(obj, float):
        return lox_number_to_str(obj)
    return str(obj)


def lox_are_numbers(*objs: LoxObject) -> bool:
    return all(isinstance(obj, float) for obj in objs)


def lox_truth(obj: LoxObject) -> bool:
    """Evaluate the truthiness of a Lox object.

    `false` and `nil` are the only falsy objects."""
    if obj is None:
        return False
    if isinstance(obj, bool):
        return obj
    return True


def lox_equality(left: LoxObject, right: LoxObject) -> bool:
    """Evaluate if two Lox objects are equal. Objects of differing types never are."""
    if type(left) is type(right):
        return left == right
    return False


def lox_division(left: float, right: float) -> float:
    """Divide with IEEE-754 semantics instead of raising on a zero divisor."""
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
