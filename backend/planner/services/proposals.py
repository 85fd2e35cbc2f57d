"""Propose -> confirm -> apply flow for assistant-suggested changes.

A proposal is stored as the single pending proposal of a session; a newer
proposal replaces it. Applying requires an affirmative confirmation and the
token issued with the pending proposal, and clears the proposal in the same
commit that saves the merged state, so an approved action is merged once.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from planner.core.errors import NoPendingProposalError, OracleError, TokenMismatchError
from planner.core.security import create_confirmation_token
from planner.models.pending_proposal import PendingProposal
from planner.oracle.adapter import ProposalOracle
from planner.schemas.action import Action, PlanProposal
from planner.schemas.state import AppState
from planner.services.actions import apply_action
from planner.services.confirmation import check_confirmation
from planner.services.scheduling import ScheduleResult
from planner.services.state_store import StateStore, state_lock

logger = logging.getLogger(__name__)


class ProposalService:
    def __init__(self, db: Session, oracle: ProposalOracle, store: StateStore | None = None):
        self.db = db
        self.oracle = oracle
        self.store = store or StateStore(db)

    def pending(self, session_id: str) -> PlanProposal | None:
        record = self.db.get(PendingProposal, session_id)
        if record is None:
            return None
        return PlanProposal(
            preview=record.preview,
            action=Action.model_validate(record.action),
            confirmation_token=record.confirmation_token,
        )

    def discard(self, session_id: str) -> bool:
        with state_lock:
            record = self.db.get(PendingProposal, session_id)
            if record is None:
                return False
            self.db.delete(record)
            self.db.commit()
        logger.info(f"Pending proposal discarded for session {session_id}")
        return True

    def propose(self, session_id: str, message: str, today: date | None = None) -> PlanProposal:
        with state_lock:
            snapshot = self.store.load().snapshot()

        # The oracle call runs outside the lock; whichever proposal is stored last wins
        try:
            proposal = self.oracle.propose(message, snapshot, today)
        except OracleError:
            self.discard(session_id)
            raise

        action_payload = proposal.action.to_payload()
        token = create_confirmation_token(
            session_id, action_payload, nonce=proposal.confirmation_token
        )
        with state_lock:
            record = self.db.get(PendingProposal, session_id)
            if record is None:
                record = PendingProposal(session_id=session_id)
            else:
                logger.info(f"Superseding pending proposal for session {session_id}")
            record.preview = proposal.preview
            record.action = action_payload
            record.confirmation_token = token
            self.db.add(record)
            self.db.commit()

        logger.info(f"Proposal stored for session {session_id}")
        return PlanProposal(preview=proposal.preview, action=proposal.action, confirmation_token=token)

    def apply(
        self,
        session_id: str,
        confirmation_token: str | None,
        action: Action,
        confirmation_text: str | None,
        today: date | None = None,
    ) -> tuple[AppState, ScheduleResult | None]:
        with state_lock:
            record = self.db.get(PendingProposal, session_id)
            if record is None:
                raise NoPendingProposalError()

            check_confirmation(confirmation_token, action.to_payload(), confirmation_text, session_id)
            if confirmation_token != record.confirmation_token:
                logger.warning(f"Apply rejected: token is not the pending one for session {session_id}")
                raise TokenMismatchError("Confirmation token belongs to a superseded proposal.")

            state, result = apply_action(self.store.load(), action, today)
            self.db.delete(record)
            self.store.save(state)

        logger.info(f"Proposal applied for session {session_id}")
        return state, result
