from fastapi import APIRouter, Depends, status

from planner.api import deps
from planner.api.routes.schedule import unscheduled_units
from planner.core.errors import NotFoundError
from planner.schemas.action import ApplyRequest, ApplyResponse, PlanProposal, ProposeRequest
from planner.services.proposals import ProposalService

router = APIRouter()


@router.post("/plan", response_model=PlanProposal)
def propose_plan(
    payload: ProposeRequest,
    session_id: str = Depends(deps.get_session_id),
    service: ProposalService = Depends(deps.get_proposal_service),
) -> PlanProposal:
    """Ask the assistant for a previewed change. Nothing is applied here."""
    return service.propose(session_id, payload.message)


@router.post("/apply", response_model=ApplyResponse)
def apply_plan(
    payload: ApplyRequest,
    session_id: str = Depends(deps.get_session_id),
    service: ProposalService = Depends(deps.get_proposal_service),
) -> ApplyResponse:
    state, result = service.apply(
        session_id,
        payload.confirmation_token,
        payload.action,
        payload.user_confirmation_text,
    )
    return ApplyResponse(
        ok=True,
        action=payload.action,
        state=state,
        unscheduled=unscheduled_units(result),
    )


@router.get("/pending", response_model=PlanProposal)
def read_pending(
    session_id: str = Depends(deps.get_session_id),
    service: ProposalService = Depends(deps.get_proposal_service),
) -> PlanProposal:
    proposal = service.pending(session_id)
    if proposal is None:
        raise NotFoundError("No pending proposal")
    return proposal


@router.delete("/pending", status_code=status.HTTP_204_NO_CONTENT)
def discard_pending(
    session_id: str = Depends(deps.get_session_id),
    service: ProposalService = Depends(deps.get_proposal_service),
) -> None:
    service.discard(session_id)
