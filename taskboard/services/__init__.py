from taskboard.services.board import BoardService
from taskboard.services.cache import EntityCache, reorder_local
from taskboard.services.drag import DragSessionController
from taskboard.services.notifications import Notifier
from taskboard.services.reconciler import Reconciler

__all__ = [
    "BoardService",
    "EntityCache",
    "reorder_local",
    "DragSessionController",
    "Notifier",
    "Reconciler",
]
