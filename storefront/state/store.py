"""
Observable application state.

State objects (session, theme) are created once per app instance and
handed to whatever needs them. Listeners are plain callables invoked
synchronously, after the state has changed, with the store itself.
"""

from typing import Callable, Generic, TypeVar

from storefront.log import get_logger

S = TypeVar("S", bound="Store")


class Store(Generic[S]):
    """Base class providing subscribe/notify."""

    def __init__(self):
        self._subscribers: list[Callable[[S], None]] = []
        self._logger = get_logger(__name__)

    def subscribe(self, listener: Callable[[S], None]) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A function that removes the listener
        """
        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._subscribers):
            try:
                listener(self)
            except Exception as e:
                self._logger.error(
                    "store_listener_failed",
                    store=type(self).__name__,
                    error=str(e),
                )
