"""Post-injection hooks."""

from typing import Any, Protocol, runtime_checkable

import structlog

from keywire.errors import HookError

__all__ = ["PostInject", "run_post_inject"]

logger = structlog.get_logger(__name__)


@runtime_checkable
class PostInject(Protocol):
    """Implemented by injection targets that act once their fields are populated.

    Example:
        >>> @dataclass
        ... class Report:
        ...     count: Annotated[int, Service("count")] = 0
        ...     label: str = ""
        ...
        ...     def post_inject(self) -> None:
        ...         self.label = f"{self.count} items"
    """

    def post_inject(self) -> None:
        ...


def run_post_inject(target: Any) -> None:
    """Invoke the target's post-injection hook, if it has one.

    Raises:
        HookError: If the hook raises. The original exception is chained as the cause.
    """
    if not isinstance(target, PostInject) or not callable(target.post_inject):
        return

    logger.debug("running post-injection hook", target=type(target).__name__)
    try:
        target.post_inject()
    except Exception as e:
        raise HookError(target, e) from e
