"""External pipeline integrations."""

from .sonarr import SonarrContext, collect_sonarr_environment, emit_move_status

__all__ = [
    "SonarrContext",
    "collect_sonarr_environment",
    "emit_move_status",
]
