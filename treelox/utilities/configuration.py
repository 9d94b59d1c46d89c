from enum import Flag, auto

# Interpreted calls deeper than this are reported as a stack overflow.
DEFAULT_MAX_CALL_DEPTH = 200

# Rough upper bound on host frames consumed by one interpreted call.
HOST_FRAMES_PER_CALL = 25


class Debug(Flag):
    DUMP_TOKENS = auto()
    DUMP_AST = auto()
    NO_INTERPRET = auto()
    BACKTRACE = auto()
