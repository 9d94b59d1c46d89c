from __future__ import annotations  # Reference the parent class in methods' annotations.

from typing import Any, Callable, Generic, Optional, Sequence, TypeVar, overload

T = TypeVar("T")  # pylint: disable=invalid-name


class StreamView(Generic[T]):
    """A "scrolling" view of a Sequence, similar to an Iterator. StreamView allows peeking
    of arbitrary elements without consumption and retrieval of arbitrary ranges."""
    # pylint: disable=multiple-statements

    def __init__(self, sequence: Sequence[T]) -> None:
        self.sequence = sequence
        self.current_index: int = 0
        self.marker_index: Optional[int] = None

    @overload
    def __getitem__(self, index: int) -> T: pass

    @overload
    def __getitem__(self: StreamView[str], index: slice) -> str: pass

    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: pass

    def __getitem__(self, index):
        return self.sequence[index]

    def __len__(self) -> int:
        return len(self.sequence)

    def has_next(self, index: Optional[int] = None) -> bool:
        return (self.current_index if index is None else index) < len(self)

    def set_marker(self) -> None:
        """Place a marker at the current index, for use by `get_slice_from_marker()`."""
        self.marker_index = self.current_index

    def peek(self, lookahead: int = 0) -> Optional[T]:
        """Return the value `lookahead` from the next one, if there is one."""
        index = self.current_index + lookahead
        if 0 <= index and self.has_next(index):
            return self[index]
        return None

    def peek_unwrap(self, lookahead: int = 0) -> T:
        """Variant of `peek()` that always returns a value. Produces an exception
        if there is not a value at `lookahead`."""
        res = self.peek(lookahead)
        assert res is not None
        return res

    def previous(self) -> T:
        """Return the most recently consumed value."""
        return self.peek_unwrap(-1)

    def match(self, *expected: Any) -> bool:
        """Test if the next value is one of the `expected` values."""
        return self.peek() in expected

    def advance(self) -> T:
        """Consume the next value if there is one and return it."""
        if (next_item := self.peek()) is not None:
            self.current_index += 1
            return next_item
        raise IndexError("Items have been exhausted.")

    def advance_if_match(self, *expected: Any) -> bool:
        """Test if the next value is one of the `expected` values. If so, consume it."""
        if self.match(*expected):
            self.advance()
            return True
        return False

    def advance_while(self, predicate: Callable[[Optional[T]], bool]) -> int:
        """Consume values for as long as `predicate` holds for the next one.
        Return the number of values consumed."""
        consumed = 0
        while self.has_next() and predicate(self.peek()):
            self.current_index += 1
            consumed += 1
        return consumed

    @overload
    def get_slice_from_marker(self: StreamView[str]) -> str: pass

    @overload
    def get_slice_from_marker(self) -> Sequence[T]: pass

    def get_slice_from_marker(self):
        """Return the slice from the marked position to the current value."""
        if self.marker_index is not None:
            return self[self.marker_index:self.current_index]
        raise RuntimeError("Marker is not set.")
