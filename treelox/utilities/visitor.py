from __future__ import annotations  # Circular references in annotations.

from abc import ABC
from typing import Any, Callable, ClassVar, Dict, Generic, TypeVar

V = TypeVar("V")
R = TypeVar("R")


class Visitor(Generic[V, R], ABC):
    """Base class that acts as a visitor in the visitor pattern.

    Implementations of visit methods are structured as follows:
    `def _visit_<Class>__(self, visitable)`

    The first implementation found along the visitable's MRO wins, so a visitor
    for a base class also handles its subclasses unless they are overridden.
    """
    _dispatch_cache: ClassVar[Dict[type, Callable[..., Any]]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._dispatch_cache = dict()

    def visit(self, visitable: V) -> R:
        """Find, cache, and call the correct visitor function."""
        node_type = type(visitable)
        impl = self._dispatch_cache.get(node_type)
        if impl is None:
            impl = self._find_impl(node_type)
            self._dispatch_cache[node_type] = impl
        return impl(self, visitable)

    @classmethod
    def _find_impl(cls, node_type: type) -> Callable[..., Any]:
        for class_ in node_type.mro():
            impl = getattr(cls, f"_visit_{class_.__name__}__", None)
            if impl is not None:
                return impl
        raise NotImplementedError(f"{cls.__name__} does not implement visit() for {node_type.__name__}")
