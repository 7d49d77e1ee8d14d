"""Re-apply the engine to content inserted after the initial sweep."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import TYPE_CHECKING

from .logger import get_logger

if TYPE_CHECKING:
    from .host import Document, Element, MutationRecord, ObserverHandle
    from .mutator import StyleMutator

logger = get_logger()


def iter_subtree(element: Element) -> Iterator[Element]:
    """The element followed by its descendants, pre-order."""
    yield element
    yield from element.iter_descendants()


class ObservationLoop:
    """Single subtree observer on the document body.

    Inserted elements (and everything under them) are snapshotted and
    transformed synchronously inside the callback. Removed elements are
    restored and their snapshots dropped when pruning is on, so a long-lived
    page that churns nodes does not accumulate stale snapshots, and a moved
    node is re-processed from its original styles.
    """

    def __init__(
        self,
        document: Document,
        mutator: StyleMutator,
        *,
        is_active: Callable[[], bool],
        site_dark: Callable[[], bool],
    ) -> None:
        self.document = document
        self.mutator = mutator
        self._is_active = is_active
        self._site_dark = site_dark
        self._handle: ObserverHandle | None = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> bool:
        """Register the observer; returns False if it was already running."""
        if self._handle is not None:
            return False
        self._handle = self.document.observe(self.document.body, self._on_mutations)
        logger.debug("observer started")
        return True

    def stop(self) -> bool:
        """Disconnect the observer; returns False if it was not running."""
        if self._handle is None:
            return False
        self._handle.disconnect()
        self._handle = None
        logger.debug("observer stopped")
        return True

    def _on_mutations(self, records: Sequence[MutationRecord]) -> None:
        # Late deliveries after stop() or disable() are dropped
        if self._handle is None or not self._is_active():
            return
        site_dark = self._site_dark()
        # A node inserted with its ancestor is reported twice in one batch
        handled: set[Element] = set()
        for record in records:
            if self.mutator.config.prune_removed:
                for node in record.removed_nodes:
                    self._release(node)
            for node in record.added_nodes:
                self._process(node, site_dark, handled)

    def _process(self, node: Element, site_dark: bool, handled: set[Element]) -> None:
        if not node.is_connected:
            return
        for element in iter_subtree(node):
            if element in handled:
                continue
            handled.add(element)
            self.mutator.save_original_style(element)
            self.mutator.apply_dark_mode(element, site_dark)

    def _release(self, node: Element) -> None:
        # A node removed and re-added in one batch is connected again; leave it to the add
        if node.is_connected:
            return
        for element in iter_subtree(node):
            self.mutator.restore_original_style(element)
