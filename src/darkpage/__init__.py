"""darkpage - reversible dark mode for rendered documents.

Main entry points:
- attach(document): the one Session for a document
- Session.enable() / Session.disable() / Session.handle_message()
- StyleMutator: per-element transform with snapshot/restore
- darkpage.dom.Document: in-memory host document
"""

from .classifier import ElementCategory, classify, detect_dark_site
from .color import HSL, Color, format_rgb, hsl_to_rgb, parse_color, rgb_to_hsl
from .config import EngineConfig, OutputColors, ThresholdSet, discover_config, load_config
from .exceptions import ConfigError, DarkpageError, ParseError, ValidationError
from .mutator import StyleMutator
from .observer import ObservationLoop
from .profiles import DirectorySiteProfiles, NullSiteProfiles, is_restricted_url
from .session import Session, SessionState, attach, detach

__version__ = "0.1.0"

__all__ = [
    "HSL",
    "Color",
    "ConfigError",
    "DarkpageError",
    "DirectorySiteProfiles",
    "ElementCategory",
    "EngineConfig",
    "NullSiteProfiles",
    "ObservationLoop",
    "OutputColors",
    "ParseError",
    "Session",
    "SessionState",
    "StyleMutator",
    "ThresholdSet",
    "ValidationError",
    "attach",
    "classify",
    "detach",
    "detect_dark_site",
    "discover_config",
    "format_rgb",
    "hsl_to_rgb",
    "is_restricted_url",
    "load_config",
    "parse_color",
    "rgb_to_hsl",
]
