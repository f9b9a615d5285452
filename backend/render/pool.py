from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar


logger = logging.getLogger(__name__)

H = TypeVar("H")


class MarkerPool(Generic[H]):
    """
    Recycles expensive marker handles across viewport changes.

    Each handle is either free or active, never both. Membership is tracked by
    identity so handles do not need to be hashable.

    `detach(handle)` runs whenever a handle goes back to the free set; it is where
    the renderer removes the marker from the map and clears its listeners.
    """

    def __init__(self, detach: Callable[[H], None] | None = None) -> None:
        self._detach = detach
        self._free: list[H] = []
        self._free_ids: set[int] = set()
        self._active: dict[int, H] = {}

    def get_handle(self) -> H | None:
        """
        Pop a free handle and mark it active; None when nothing is free.

        None is not an error: the caller creates a new handle, which becomes
        poolable the first time it is released.
        """
        if not self._free:
            return None
        handle = self._free.pop()
        self._free_ids.discard(id(handle))
        self._active[id(handle)] = handle
        return handle

    def release_handle(self, handle: H) -> None:
        if handle is None:
            raise TypeError("release_handle() needs a handle, got None")
        key = id(handle)
        if key in self._free_ids:
            # Already free: idempotent.
            return
        # Detach before moving: a failing detach leaves the handle where it was.
        self._clean(handle)
        if self._active.pop(key, None) is None:
            logger.debug("pool registered new handle (total=%d)", self.total_count() + 1)
        self._free.append(handle)
        self._free_ids.add(key)

    def release_all(self) -> None:
        # Used on full viewport teardown / unmount.
        for key, handle in list(self._active.items()):
            self._clean(handle)
            del self._active[key]
            self._free.append(handle)
            self._free_ids.add(key)

    def trim(self, max_free: int) -> list[H]:
        """
        Drop free handles beyond `max_free` and hand them back for destruction.

        Active handles are never touched.
        """
        keep = max(0, int(max_free))
        if len(self._free) <= keep:
            return []
        dropped = self._free[keep:]
        self._free = self._free[:keep]
        for handle in dropped:
            self._free_ids.discard(id(handle))
        return dropped

    def destroy(self) -> list[H]:
        """
        Forget every handle (active ones are detached first) and return them all.
        """
        self.release_all()
        dropped = list(self._free)
        self._free.clear()
        self._free_ids.clear()
        return dropped

    def is_active(self, handle: H) -> bool:
        return id(handle) in self._active

    def is_free(self, handle: H) -> bool:
        return id(handle) in self._free_ids

    def active_count(self) -> int:
        return len(self._active)

    def free_count(self) -> int:
        return len(self._free)

    def total_count(self) -> int:
        return len(self._active) + len(self._free)

    def _clean(self, handle: H) -> None:
        if self._detach is not None:
            self._detach(handle)
