from typing import Any, Generic, Optional, TypeVar, get_args

import structlog

T = TypeVar("T")


def context_name(owner: Any) -> str:
    """Qualified name of ``owner`` as used for the logger name."""
    module = getattr(owner, "__module__", None)
    name = getattr(owner, "__qualname__", None) or getattr(owner, "__name__", None) or repr(owner)
    return f"{module}.{name}" if module else name


class ContextLogger(Generic[T]):
    """Structured logger bound to the qualified name of the consuming type ``T``.

    Generated initializers request ``ContextLogger[Owner]``; the runtime
    container builds it from the open-generic registration added by
    ``ServiceCollection.add_logging``.

    Example:
        >>> log = ContextLogger[OrderService]()
        >>> log.info("order_placed", order_id=42)
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self._name = name
        self._logger: Any = None

    @property
    def name(self) -> str:
        # __orig_class__ is only set once __init__ has returned
        if self._name is None:
            arguments = get_args(getattr(self, "__orig_class__", None))
            self._name = context_name(arguments[0]) if arguments else type(self).__name__
        return self._name

    @property
    def logger(self) -> Any:
        if self._logger is None:
            self._logger = structlog.get_logger(self.name)
        return self._logger

    def bind(self, **context: Any) -> Any:
        return self.logger.bind(**context)

    def debug(self, event: str, **context: Any) -> None:
        self.logger.debug(event, **context)

    def info(self, event: str, **context: Any) -> None:
        self.logger.info(event, **context)

    def warning(self, event: str, **context: Any) -> None:
        self.logger.warning(event, **context)

    def error(self, event: str, **context: Any) -> None:
        self.logger.error(event, **context)

    def exception(self, event: str, **context: Any) -> None:
        self.logger.exception(event, **context)
