"""Synchronous delivery of completed records to listeners."""

from typing import Callable, Dict, List, Optional

from commerceml_stream.shared.errors import ListenerError
from commerceml_stream.shared.logging import CorrelationLogger, get_logger

from .nodes import ElementNode

Listener = Callable[[ElementNode], None]


class Dispatcher:
    """Calls listeners registered per rule name.

    Listeners run in registration order on the caller's thread; ``emit`` returns
    only after every listener has returned. The first failing listener aborts
    the emission with :class:`ListenerError`.
    """

    def __init__(self, logger: Optional[CorrelationLogger] = None) -> None:
        self._listeners: Dict[str, List[Listener]] = {}
        self.logger = logger or get_logger(__name__, None, "dispatcher")

    def on(self, rule_name: str, handler: Listener) -> None:
        """Register ``handler`` for records of ``rule_name``."""
        if not callable(handler):
            raise TypeError("Listener must be callable")
        self._listeners.setdefault(rule_name, []).append(handler)

    def off(self, rule_name: str, handler: Listener) -> bool:
        """Remove one registration of ``handler``; returns whether it was found."""
        handlers = self._listeners.get(rule_name, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def listeners(self, rule_name: str) -> List[Listener]:
        return list(self._listeners.get(rule_name, ()))

    def has_listeners(self, rule_name: str) -> bool:
        return bool(self._listeners.get(rule_name))

    def emit(self, rule_name: str, record: ElementNode) -> int:
        """Deliver ``record`` to every listener of ``rule_name``.

        Returns:
            Number of listeners invoked

        Raises:
            ListenerError: If a listener raises; the original exception is chained
        """
        # Snapshot so registrations made by a listener apply from the next record.
        handlers = tuple(self._listeners.get(rule_name, ()))
        for handler in handlers:
            try:
                handler(record)
            except Exception as exc:
                self.logger.error(
                    "Listener failed",
                    extra={"rule": rule_name, "error": str(exc)},
                    exc_info=True,
                )
                raise ListenerError(rule_name, handler, exc) from exc
        return len(handlers)
