"""Stack of currently open element names."""

from typing import List, Optional, Tuple

from commerceml_stream.shared.errors import StructuralError

Path = Tuple[str, ...]


class PathStack:
    """Ordered element names from the document root to the current position.

    ``current()`` hands out an immutable tuple that is cached until the next
    mutation, so callers holding it never observe later changes.
    """

    def __init__(self, max_depth: Optional[int] = None) -> None:
        self._names: List[str] = []
        self._cached: Optional[Path] = ()
        self.max_depth = max_depth

    def push(self, name: str) -> None:
        """Enter an element."""
        if self.max_depth is not None and len(self._names) >= self.max_depth:
            raise StructuralError(
                f"Element <{name}> exceeds maximum nesting depth {self.max_depth}",
                actual=name,
                path=self._names,
            )
        self._names.append(name)
        self._cached = None

    def pop(self, name: str) -> str:
        """Leave an element, checking that ``name`` is the one currently open.

        Raises:
            StructuralError: If nothing is open or another element is open
        """
        if not self._names:
            raise StructuralError(
                f"Closing tag </{name}> without an open element",
                actual=name,
            )
        expected = self._names[-1]
        if expected != name:
            raise StructuralError(
                f"Closing tag </{name}> does not match open element <{expected}>",
                expected=expected,
                actual=name,
                path=self._names,
            )
        self._names.pop()
        self._cached = None
        return expected

    def current(self) -> Path:
        """Return the present path, root first."""
        if self._cached is None:
            self._cached = tuple(self._names)
        return self._cached

    @property
    def depth(self) -> int:
        return len(self._names)

    @property
    def top(self) -> Optional[str]:
        return self._names[-1] if self._names else None

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"PathStack({'/'.join(self._names)!r})"
