"""
Declaration markers for multi-body handler parameters.

Usage in handler signatures::

    @multi_body
    async def create(
        order: Annotated[Order, MultiBody("order"), Valid()],
        errors: BindingErrors,
        count: Annotated[Int32, MultiBody(required=False)],
    ): ...
"""

from typing import Any, Optional, Tuple


class MultiBody:
    """Binds a parameter to one key of the JSON request body object."""

    def __init__(self, name: Optional[str] = None, *, required: bool = True):
        self.name = name or None
        self.required = required

    def __repr__(self) -> str:
        return f"MultiBody(name={self.name!r}, required={self.required!r})"


class Valid:
    """Requests validation of the bound value."""

    groups: Tuple[Any, ...] = ()

    def __repr__(self) -> str:
        return "Valid()"


class Validated:
    """Requests validation of the bound value for the given groups."""

    def __init__(self, *groups: Any):
        self.groups = tuple(groups)

    def __repr__(self) -> str:
        return f"Validated{self.groups!r}"
