"""Collection rules and the rule table used for start-path matching.

A rule names the exact element path at which collection starts and, optionally,
the subpaths below it whose content is kept. Include paths are written as full
paths from the document root, the way CommerceML rule tables are usually
written, and are stored relative to the start path.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from commerceml_stream.shared.errors import DuplicateRuleError, RuleError
from commerceml_stream.shared.logging import get_logger

from .path_stack import Path

PathLike = Union[str, Sequence[str]]

PATH_SEPARATOR = "/"


def parse_path(value: PathLike) -> Path:
    """Normalize a path given as ``"/A/B"`` or as a sequence of names.

    Raises:
        RuleError: If the path is empty or contains an empty element name
    """
    if isinstance(value, str):
        names = tuple(value.strip(PATH_SEPARATOR).split(PATH_SEPARATOR))
    else:
        names = tuple(value)
    if not names or any(not isinstance(n, str) or not n for n in names):
        raise RuleError(f"Invalid path: {value!r}")
    return names


def format_path(path: Path) -> str:
    return PATH_SEPARATOR + PATH_SEPARATOR.join(path)


@dataclass(frozen=True)
class Rule:
    """A named collection rule.

    ``include_paths`` holds paths relative to ``start_path``; ``None`` means every
    element below the start is kept. An empty set keeps only the start element
    itself with its attributes and text.
    """

    name: str
    start_path: Path
    include_paths: Optional[FrozenSet[Path]] = None
    _ancestors: FrozenSet[Path] = field(
        default=frozenset(), init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not self.name:
            raise RuleError("Rule name cannot be empty")
        if not self.start_path:
            raise RuleError(f"Rule '{self.name}' has an empty start path")
        object.__setattr__(self, "start_path", tuple(self.start_path))
        if self.include_paths is not None:
            object.__setattr__(
                self, "include_paths", frozenset(tuple(p) for p in self.include_paths)
            )
            ancestors = frozenset(
                include[:i]
                for include in self.include_paths
                for i in range(len(include) + 1)
            )
            object.__setattr__(self, "_ancestors", ancestors)

    @classmethod
    def from_paths(
        cls,
        name: str,
        start: PathLike,
        include: Optional[Iterable[PathLike]] = None
    ) -> "Rule":
        """Build a rule from absolute start and include paths.

        Args:
            name: Unique rule name, used as the listener event name
            start: Exact element path that triggers collection
            include: Absolute paths to keep, each beginning with ``start``;
                ``None`` keeps the whole subtree

        Raises:
            RuleError: If a path is malformed or an include path lies outside
                the start path

        Example:
            >>> rule = Rule.from_paths("offer", "/Catalog/Offers/Offer")
        """
        start_path = parse_path(start)
        if include is None:
            return cls(name, start_path, None)

        relative = set()
        for item in include:
            path = parse_path(item)
            if path[:len(start_path)] != start_path:
                raise RuleError(
                    f"Include path {format_path(path)} of rule '{name}' "
                    f"is not below start path {format_path(start_path)}"
                )
            relative.add(path[len(start_path):])
        return cls(name, start_path, frozenset(relative))

    @property
    def includes_all(self) -> bool:
        return self.include_paths is None

    def retains(self, relative: Path) -> bool:
        """Check whether content at ``relative`` (below the start) is kept.

        A path is kept when it leads towards an include path or lies inside one.
        The start element itself is always kept.
        """
        if not relative or self.include_paths is None or relative in self._ancestors:
            return True
        for i in range(len(relative)):
            if relative[:i] in self.include_paths:
                return True
        return False

    def describe(self) -> Dict[str, object]:
        """Plain representation for logs and CLI output."""
        return {
            "name": self.name,
            "start": format_path(self.start_path),
            "include": (
                "all" if self.include_paths is None
                else sorted(format_path(self.start_path + p) for p in self.include_paths)
            ),
        }


class RuleTable:
    """Registered rules indexed by start path.

    The table is frozen when streaming begins; rules cannot be added mid-run.
    """

    def __init__(self, rules: Optional[Iterable[Rule]] = None) -> None:
        self._by_name: Dict[str, Rule] = {}
        self._by_start: Dict[Path, List[Rule]] = {}
        self._frozen = False
        self.logger = get_logger(__name__, None, "rule_table")
        for rule in rules or ():
            self.register(rule)

    def register(self, rule: Rule) -> None:
        """Add a rule.

        Raises:
            DuplicateRuleError: If a rule with the same name exists
            RuleError: If the table is frozen
        """
        if self._frozen:
            raise RuleError(
                f"Cannot register rule '{rule.name}' after streaming has started"
            )
        if rule.name in self._by_name:
            raise DuplicateRuleError(rule.name)
        self._by_name[rule.name] = rule
        self._by_start.setdefault(rule.start_path, []).append(rule)
        self.logger.debug("Registered rule", extra={"rule": rule.describe()})

    def match(self, path: Path) -> Tuple[Rule, ...]:
        """Rules whose start path equals ``path``, in registration order."""
        return tuple(self._by_start.get(path, ()))

    def get(self, name: str) -> Optional[Rule]:
        return self._by_name.get(name)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)
