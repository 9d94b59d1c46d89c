from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional

from treelox.language.lox_types import LoxLiteral, lox_number_literal_to_str


class Tk(Enum):
    # single-char
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    LEFT_BRACE = "{"
    RIGHT_BRACE = "}"
    COMMA = ","
    DOT = "."
    MINUS = "-"
    PLUS = "+"
    SEMICOLON = ";"
    STAR = "*"
    # compoundable
    BANG = "!"
    EQUAL = "="
    GREATER = ">"
    LESS = "<"
    BANG_EQUAL = "!="
    EQUAL_EQUAL = "=="
    GREATER_EQUAL = ">="
    LESS_EQUAL = "<="
    SLASH = "<slash>"  # Shares its first character with comments.
    # keywords
    AND = "@and"
    CLASS = "@class"
    ELSE = "@else"
    FALSE = "@false"
    FUN = "@fun"
    FOR = "@for"
    IF = "@if"
    NIL = "@nil"
    OR = "@or"
    PRINT = "@print"
    RETURN = "@return"
    SUPER = "@super"
    THIS = "@this"
    TRUE = "@true"
    VAR = "@var"
    WHILE = "@while"
    # literals
    IDENTIFIER = "<identifier>"
    STRING = "<string>"
    NUMBER = "<number>"
    EOF = "<eof>"

    @classmethod
    def iter_values(cls) -> Iterator[Any]:
        """Iterate over the values of the enum."""
        for variant in cls:
            yield variant.value


# Tokens without a fixed lexeme are named in angle brackets, and keywords are prefixed with "@".
SINGLE_CHAR_TOKENS = tuple(
    val for val in Tk.iter_values()
    if isinstance(val, str) and len(val) == 1
)
COMPOUND_TOKENS = tuple(
    val for val in Tk.iter_values()
    if isinstance(val, str) and len(val) == 2 and not val.startswith("@")
)
KEYWORDS: Dict[str, Tk] = {
    variant.value[1:]: variant
    for variant in Tk
    if isinstance(variant.value, str) and variant.value.startswith("@")
}


@dataclass(frozen=True)
class Token:
    """A representation of a token. `line` is the source line on which the lexeme ends."""
    token_type: Tk
    lexeme: str
    literal: Optional[LoxLiteral]
    line: int

    @classmethod
    def create_arbitrary(cls, token_type: Tk, lexeme: str, literal: Optional[LoxLiteral] = None) -> Token:
        return cls(token_type, lexeme, literal, -1)

    def __eq__(self, other: Any) -> bool:
        """Compare a `Tk` to a `Token`'s own type.

        i.e., a `Token` of type `FOO` is equal to `Tk.FOO`. This provides better
        ergonomics when used in a `StreamView`."""
        if isinstance(other, Tk):
            return self.token_type is other
        if isinstance(other, Token):
            return (self.token_type, self.lexeme, self.literal, self.line) == \
                (other.token_type, other.lexeme, other.literal, other.line)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.token_type, self.lexeme, self.line))

    def __str__(self) -> str:
        attributes = ", ".join(
            f"{name}={repr(getattr(self, name))}"
            for name in ("lexeme", "literal", "line")
        )
        return f"{self.token_type.name}: {attributes}"

    def to_string(self) -> str:
        """The `tokenize` line format: `<KIND> <lexeme> <literal-or-null>`."""
        if self.literal is None:
            literal = "null"
        elif isinstance(self.literal, float):
            literal = lox_number_literal_to_str(self.literal)
        else:
            literal = self.literal
        return f"{self.token_type.name} {self.lexeme} {literal}"
