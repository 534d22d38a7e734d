from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

R = TypeVar("R")

__all__ = ["StringMemoized", "memoize_as_strings"]


class StringMemoized(Generic[R]):
    """Cache results of `func` keyed by its positional args joined as strings.

    Fast, but the cache grows without bound.  Arguments whose string forms
    are equal (``1`` and ``"1"``) share a cache entry.
    """

    def __init__(self, func: Callable[..., R], separator: str = "-") -> None:
        self.__wrapped__ = func
        self.separator = separator
        self.cache: dict[str, R] = {}
        self.__name__: str = getattr(func, "__name__", "")
        self.__qualname__: str = getattr(func, "__qualname__", "")
        self.__doc__: str | None = getattr(func, "__doc__", None)

    def __call__(self, *args: Any) -> R:
        key = self.separator.join(map(str, args))
        if key not in self.cache:
            self.cache[key] = self.__wrapped__(*args)
        return self.cache[key]


def memoize_as_strings(
    func: Callable[..., R], separator: str = "-"
) -> StringMemoized[R]:
    """Memoize `func`, treating calls with the same stringified args as equal."""
    return StringMemoized(func, separator)
