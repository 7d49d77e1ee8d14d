"""Session controller: the Enabled/Disabled state machine for one document."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .classifier import detect_dark_site
from .color import parse_color
from .config import EngineConfig
from .exceptions import ValidationError
from .logger import get_logger
from .mutator import StyleMutator
from .observer import ObservationLoop
from .profiles import SiteProfiles, profiles_for

if TYPE_CHECKING:
    from .host import Document, Element

logger = get_logger()

ACTIVE_CLASS = "darkpage-enabled"
TOGGLE_ACTION = "toggleDarkMode"


class SessionState(str, Enum):
    DISABLED = "disabled"
    ENABLED = "enabled"


class ToggleMessage(BaseModel):
    """Control message sent by the host controller."""

    action: Literal["toggleDarkMode"]
    enabled: bool


class Session:
    """Dark mode for one document.

    Owns the frozen site-theme sample, the snapshot table (via StyleMutator)
    and the observation loop. enable() and disable() are idempotent.
    """

    def __init__(
        self,
        document: Document,
        config: EngineConfig | None = None,
        profiles: SiteProfiles | None = None,
    ) -> None:
        self.document = document
        self.config = config or EngineConfig()
        self.profiles = profiles if profiles is not None else profiles_for(self.config.profiles_dir)
        self.mutator = StyleMutator(self.config)
        self.state = SessionState.DISABLED
        self.is_dark_site = False
        self.loop = ObservationLoop(
            document,
            self.mutator,
            is_active=self._is_marked,
            site_dark=lambda: self.is_dark_site,
        )

    @property
    def enabled(self) -> bool:
        return self.state is SessionState.ENABLED

    def enable(self) -> bool:
        """Darken the document and start watching it; False if already enabled."""
        if self.enabled:
            return False
        document = self.document
        root = document.document_element
        root.class_list.add(ACTIVE_CLASS)
        self.profiles.inject(document.hostname, document)

        # Sampled once; the engine's own writes must not flip it mid-session
        self.is_dark_site = detect_dark_site(document, self.config.thresholds)
        logger.checks(
            f"{document.hostname}: {'dark' if self.is_dark_site else 'light'} site theme"
        )

        count = 0
        for element in list(document.iter_elements()):
            self.mutator.save_original_style(element)
            self.mutator.apply_dark_mode(element, self.is_dark_site)
            count += 1
        logger.changes(f"darkened {count} elements")

        if not self.is_dark_site:
            self._force_dark_canvas(document.body)
            self._force_dark_canvas(root)

        self.state = SessionState.ENABLED
        self.start_observer()
        return True

    def disable(self) -> bool:
        """Stop watching and restore every element; False if already disabled."""
        if not self.enabled:
            return False
        document = self.document
        self.stop_observer()
        self.profiles.remove(document.hostname, document)

        for element in list(document.iter_elements()):
            self.mutator.restore_original_style(element)
        # Elements detached while enabled and never pruned
        for element in self.mutator.snapshotted_elements():
            self.mutator.restore_original_style(element)

        document.document_element.class_list.remove(ACTIVE_CLASS)
        self.state = SessionState.DISABLED
        self.is_dark_site = False
        logger.changes(f"{document.hostname}: dark mode disabled")
        return True

    def toggle(self, enabled: bool) -> bool:
        return self.enable() if enabled else self.disable()

    def start_observer(self) -> bool:
        return self.loop.start()

    def stop_observer(self) -> bool:
        return self.loop.stop()

    def handle_message(self, message: dict[str, Any]) -> bool:
        """Route a control message; messages for other actions are ignored.

        Returns True when the message changed the session state.

        Raises:
            ValidationError: If a toggle message is malformed
        """
        if message.get("action") != TOGGLE_ACTION:
            logger.debug(f"ignoring message {message!r}")
            return False
        try:
            toggle = ToggleMessage.model_validate(message)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {TOGGLE_ACTION} message: {e}") from e
        return self.toggle(toggle.enabled)

    def _is_marked(self) -> bool:
        return self.document.document_element.class_list.contains(ACTIVE_CLASS)

    def _force_dark_canvas(self, element: Element) -> None:
        """Paint root/body black when they are still transparent or light."""
        background = parse_color(element.computed_style().get_property_value("background-color"))
        if background is None or background.brightness > self.config.thresholds.bg_brightness:
            self.mutator.write(element, "background-color", self.config.colors.root_background)


# Sessions hold their document, so entries live until detach()
_sessions: dict[Any, Session] = {}


def attach(
    document: Document,
    config: EngineConfig | None = None,
    profiles: SiteProfiles | None = None,
) -> Session:
    """Return the document's session, creating it on first attach.

    Attaching again (e.g. after the engine is re-injected) returns the existing
    session untouched; config and profiles are only used the first time.
    """
    session = _sessions.get(document)
    if session is None:
        session = Session(document, config, profiles)
        _sessions[document] = session
        logger.debug(f"attached session to {document.hostname}")
    return session


def detach(document: Document) -> None:
    """Disable and forget the document's session, if any."""
    session = _sessions.pop(document, None)
    if session is not None:
        session.disable()
