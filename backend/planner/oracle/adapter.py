from __future__ import annotations

import json
import logging
import secrets
from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from pydantic import ValidationError

from planner.core.errors import OracleError
from planner.oracle.context_utils import build_context_lines
from planner.schemas.action import PlanProposal

logger = logging.getLogger(__name__)


class ProposalOracle(ABC):
    """Interface for AI providers that turn free text into a proposed action."""

    @abstractmethod
    def propose(
        self, message: str, snapshot: dict[str, Any], today: date | None = None
    ) -> PlanProposal:
        """Return a preview and a structured action. Never applies anything."""

    def _user_content(self, message: str, snapshot: dict[str, Any]) -> str:
        summary = "\n".join(build_context_lines(snapshot))
        return (
            f"CURRENT_STATE: {json.dumps(snapshot)}\n"
            f"SUMMARY:\n{summary}\n\n"
            f"USER_MESSAGE: {message}"
        )

    def _parse_proposal(self, raw: Any) -> PlanProposal:
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise OracleError("The assistant returned malformed JSON.") from exc
        if not isinstance(raw, dict):
            raise OracleError("The assistant returned an unexpected response.")

        action = raw.get("action")
        # Replan by default so an applied change is reflected in the schedule
        if isinstance(action, dict) and not isinstance(action.get("replan"), bool):
            action["replan"] = True
        if not raw.get("confirmationToken"):
            raw["confirmationToken"] = secrets.token_urlsafe(12)

        try:
            return PlanProposal.model_validate(raw)
        except ValidationError as exc:
            logger.warning(f"Invalid proposal from assistant: {exc}")
            raise OracleError("The assistant proposed an invalid change.") from exc
