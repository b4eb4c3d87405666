"""
Preview payload synchronization.
"""

from .payload_synchronizer import (
    PreviewPayloadSynchronizer,
    PreviewRequest,
    SyncResult,
    SyncStatus
)

__all__ = [
    'PreviewPayloadSynchronizer',
    'PreviewRequest',
    'SyncResult',
    'SyncStatus'
]
