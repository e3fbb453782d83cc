"""Application layer - correlation, session sequencing and the sync service."""

from .correlator import RequestCorrelator
from .sync_service import SyncService
from .sync_session import SessionSequencer

__all__ = ["RequestCorrelator", "SessionSequencer", "SyncService"]
