"""Runtime - The chain of services being resolved on each thread."""

import threading
from contextlib import contextmanager
from typing import Any, Iterator, List, Tuple

from miraveja_digen.domain import CircularDependencyError
from miraveja_digen.domain.exceptions import type_name


class ResolutionPath:
    """Tracks which services are under construction, outermost first.

    Frames are the services exactly as requested, so ``IRepository[User]``
    and ``IRepository[Order]`` are distinct frames even though both close the
    same open-generic registration. Each thread has its own path, which lets
    one provider serve concurrent resolutions.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _frames(self) -> List[Any]:
        if not hasattr(self._local, "frames"):
            self._local.frames = []
        return self._local.frames

    @property
    def frames(self) -> Tuple[Any, ...]:
        return tuple(self._frames())

    @contextmanager
    def entering(self, service: Any) -> Iterator[None]:
        """Hold a frame for ``service`` while it is constructed.

        Raises:
            CircularDependencyError: If ``service`` is already under construction on this thread.

        Example:
            >>> with path.entering(IRepository[User]):
            ...     instance = construct()
        """
        frames = self._frames()
        if service in frames:
            raise CircularDependencyError(frames[frames.index(service) :] + [service])
        frames.append(service)
        try:
            yield
        finally:
            frames.pop()

    def describe(self) -> str:
        """Readable path, e.g. ``Orders -> IRepository[User]``."""
        return " -> ".join(type_name(frame) for frame in self._frames())
