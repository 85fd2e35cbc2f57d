from planner.models.app_state import AppStateRecord
from planner.models.pending_proposal import PendingProposal

__all__ = [
    "AppStateRecord",
    "PendingProposal",
]
