from fastapi import Depends, Header
from sqlalchemy.orm import Session

from planner.db.session import get_db
from planner.oracle.adapter import ProposalOracle
from planner.oracle.factory import get_proposal_oracle
from planner.services.proposals import ProposalService
from planner.services.state_store import StateStore

DEFAULT_SESSION_ID = "default"


def get_session_id(x_session_id: str | None = Header(default=None)) -> str:
    """Pending proposals are kept per client session."""
    return (x_session_id or "").strip() or DEFAULT_SESSION_ID


def get_state_store(db: Session = Depends(get_db)) -> StateStore:
    return StateStore(db)


def get_oracle() -> ProposalOracle:
    return get_proposal_oracle()


def get_proposal_service(
    db: Session = Depends(get_db),
    oracle: ProposalOracle = Depends(get_oracle),
) -> ProposalService:
    return ProposalService(db, oracle)
