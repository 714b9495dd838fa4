"""Shared drifting-dot board: relay server, wire packets and the client motion model."""

__version__ = "0.1.0"
__all__ = ["packet", "motion", "server"]