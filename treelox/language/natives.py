import time
from typing import Tuple

from treelox.language.lox_callable import LoxNativeFunction


def _clock() -> float:
    return time.time()


NATIVE_FUNCTIONS: Tuple[LoxNativeFunction, ...] = (
    LoxNativeFunction("clock", 0, _clock),
)
