import sys
from typing import Any, Iterable, Tuple

from treelox.lexing.token import Token

DUMP_RULE_WIDTH = 20


def dump_internal(stage: str, *content: Any) -> None:
    """Print the output of a pipeline `stage` between two rules."""
    print(f"{stage} Dump".center(DUMP_RULE_WIDTH, "~"))
    for item in content:
        print(item)
    print("~" * DUMP_RULE_WIDTH)


def eprint(*args: Any, **kwargs: Any) -> None:
    """`print()` to stderr."""
    print(*args, file=sys.stderr, **kwargs)


def node_fields(node: Any, suffix: str) -> Tuple[str, Iterable[str]]:
    """Describe an AST node as its short kind name ("VariableDeclarationStmt" -> "variabledeclaration")
    and the text of each of its fields. Tokens are shown by their lexeme."""
    kind = type(node).__name__
    if kind.endswith(suffix):
        kind = kind[:-len(suffix)]
    fields = (
        value.lexeme if isinstance(value, Token) else str(value)
        for value in vars(node).values()
    )
    return kind.lower(), fields


def indent(*blocks: Any) -> str:
    """Indent every line of every block by a tab, one line per output line."""
    return "".join(
        f"\t{line}\n"
        for block in blocks
        for line in str(block).splitlines()
    )
