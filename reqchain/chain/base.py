"""Middleware storage and parent/child inheritance shared by all chains.

A chain holds its own ordered middleware list plus an optional parent set
at construction. Its effective middleware is the parent's effective
middleware followed by its own, so parent middleware always wraps outermost.

Chains are not synchronized. Appending while another thread compiles the
same chain (or appends to it) is the caller's responsibility to serialize.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from reqchain.common.exceptions import ChainConfigurationError

MiddlewareT = TypeVar("MiddlewareT")
ChainT = TypeVar("ChainT", bound="BaseChain[Any]")


def _chain_family(cls: type) -> type:
    """The most general BaseChain subclass cls derives from (Chain or AsyncChain)."""
    for klass in reversed(cls.__mro__):
        if issubclass(klass, BaseChain) and klass is not BaseChain:
            return klass
    return cls


class BaseChain(Generic[MiddlewareT]):
    """Ordered, appendable middleware collection with an optional parent.

    Subclasses supply compile() and the function adapters for their
    handler flavour (sync or async).
    """

    def __init__(
        self,
        *middleware: MiddlewareT,
        parent: BaseChain[MiddlewareT] | None = None,
    ) -> None:
        """Initialize the chain.

        Args:
            middleware: Initial middleware, outermost first.
            parent: Chain whose middleware wraps this chain's middleware.
                Must be the same kind of chain (sync or async).

        Raises:
            ChainConfigurationError: If parent is a different kind of chain
                or any middleware is invalid (see append()).
        """
        family = _chain_family(type(self))
        if parent is not None and not isinstance(parent, family):
            raise ChainConfigurationError(
                f"{type(self).__name__} cannot inherit from "
                f"{type(parent).__name__}"
            )
        self._parent = parent
        self._middleware: list[MiddlewareT] = []
        self.append(*middleware)

    @property
    def parent(self) -> BaseChain[MiddlewareT] | None:
        """The parent chain, or None for a root chain."""
        return self._parent

    @property
    def middleware(self) -> list[MiddlewareT]:
        """A copy of this chain's own middleware, excluding the parent's."""
        return list(self._middleware)

    def append(self, *middleware: MiddlewareT) -> None:
        """Add middleware to the end of this chain's own list.

        Nothing is added unless every item is valid.

        Raises:
            ChainConfigurationError: If any middleware is None or has no
                callable wrap() method.
        """
        for index, item in enumerate(middleware):
            if item is None:
                raise ChainConfigurationError(
                    f"Middleware at position {index} is None"
                )
            if not callable(getattr(item, "wrap", None)):
                raise ChainConfigurationError(
                    f"Middleware at position {index} has no wrap() method: "
                    f"{type(item).__name__}"
                )
        self._middleware.extend(middleware)

    def effective_middleware(self) -> list[MiddlewareT]:
        """Inheritance-resolved middleware, parent's first, outermost first."""
        if self._parent is None:
            return list(self._middleware)
        return self._parent.effective_middleware() + self._middleware

    def derive_child(self: ChainT, *middleware: Any) -> ChainT:
        """Create a chain that inherits this chain's middleware.

        Args:
            middleware: The child's own initial middleware.

        Returns:
            A new chain of the same class with this chain as its parent.
        """
        return type(self)(*middleware, parent=self)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(middleware={len(self._middleware)}, "
            f"has_parent={self._parent is not None})"
        )
