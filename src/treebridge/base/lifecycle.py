"""Disposal handles returned by registration calls."""

from collections.abc import Callable


class Disposable:
    """Runs a cleanup callback once.

    Returned by provider and command registration. Disposing twice is a no-op,
    and the handle can be used as a context manager.

    Example:
        >>> handle = bridge.register_tree_node_provider("files", provider)
        >>> ...
        >>> handle.dispose()  # provider unregistered
    """

    def __init__(self, on_dispose: Callable[[], None]):
        self._on_dispose = on_dispose
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._on_dispose()

    def __enter__(self) -> "Disposable":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()
