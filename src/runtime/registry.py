# =============================================================================
# Handler Registry
# =============================================================================
# Ordered (pattern, handler) pairs. A pattern resolves a key only when the
# regular expression matches the whole key.
# =============================================================================

import logging
import re
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# Handlers may be sync or async; async results are awaited by the engine
HandlerFunc = Callable[..., Any]


class HandlerRegistry:
    """
    First-match-wins lookup of handlers by regex over a handler key.

    Usage:
        sns_handlers = HandlerRegistry()

        @sns_handlers.register(r"arn:aws:sns:.*:alerts")
        async def handle_alert(event):
            ...

    Entries are kept in registration order. Once frozen (DispatchConfig
    freezes every registry it is given) no further entries may be added.
    """

    def __init__(self, entries: Union[Mapping[str, HandlerFunc], Iterable[Tuple[str, HandlerFunc]], None] = None):
        self._entries: List[Tuple[re.Pattern, HandlerFunc]] = []
        self._frozen = False
        if entries is None:
            return
        items = entries.items() if isinstance(entries, Mapping) else entries
        for pattern, handler in items:
            self.add(pattern, handler)

    def add(self, pattern: Union[str, re.Pattern], handler: HandlerFunc) -> None:
        """Manually register a handler for a pattern."""
        if self._frozen:
            raise RuntimeError("Cannot register handlers on a frozen registry")
        if not callable(handler):
            raise TypeError(f"Handler for pattern {pattern!r} is not callable")
        compiled = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
        self._entries.append((compiled, handler))

    def register(self, pattern: Union[str, re.Pattern]):
        """Decorator form of add()."""
        def decorator(func: HandlerFunc) -> HandlerFunc:
            self.add(pattern, func)
            return func
        return decorator

    def freeze(self) -> "HandlerRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def patterns(self) -> List[str]:
        return [compiled.pattern for compiled, _ in self._entries]

    def resolve(self, key: Optional[str]) -> Optional[HandlerFunc]:
        """
        Find the handler for a key.

        Entries are tried in registration order and the first whose pattern
        matches the entire key wins. A pattern matching only part of the key
        (e.g. `foo` against `foo/bar`) does not resolve.

        Returns:
            The handler, or None when nothing matches
        """
        if key is None:
            return None
        for compiled, handler in self._entries:
            if compiled.fullmatch(key):
                return handler
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.resolve(key) is not None

    def __repr__(self) -> str:
        return f"HandlerRegistry(patterns={self.patterns!r}, frozen={self._frozen})"

