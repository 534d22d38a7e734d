from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

__all__ = ["bytes_length_from_string", "create_template_tag"]


def create_template_tag(
    mapper: Callable[[Any], object],
) -> Callable[..., str]:
    """Create a function that builds a string, passing every value through `mapper`.

    The returned tag takes the static string pieces followed by the values that
    go between them, so there must be exactly one more piece than values.

    Examples
    --------
    ```python
    from urllib.parse import quote

    url = create_template_tag(lambda v: quote(str(v), safe=""))
    url(["https://example.com/id/", ""], "spaces and /// are escaped")
    # 'https://example.com/id/spaces%20and%20%2F%2F%2F%20are%20escaped'
    ```
    """

    def tag(static_strings: Sequence[str], *parts: Any) -> str:
        if len(static_strings) != len(parts) + 1:
            raise InvalidArgumentError(
                "static_strings",
                static_strings,
                f"must have exactly {len(parts) + 1} items for {len(parts)} values",
            )
        pieces = [
            f"{static}{mapper(part)}" for static, part in zip(static_strings, parts)
        ]
        pieces.append(static_strings[-1])
        return "".join(pieces)

    return tag


def bytes_length_from_string(string: str) -> int:
    """Return the length of `string` encoded as UTF-8, in bytes."""
    return len(string.encode("utf-8"))
