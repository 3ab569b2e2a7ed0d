"""Runtime services shared by every editor component."""

from rune.runtime import telemetry

__all__ = ["telemetry"]
