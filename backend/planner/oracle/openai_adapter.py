from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any

from openai import OpenAI, OpenAIError

from planner.core.errors import OracleError
from planner.oracle.adapter import ProposalOracle
from planner.oracle.context_utils import PROPOSAL_SCHEMA, build_system_prompt
from planner.schemas.action import PlanProposal

logger = logging.getLogger(__name__)


class OpenAIProposalOracle(ProposalOracle):
    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        client: Any = None,
    ):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.model = model
        if client is not None:
            self.client = client
        elif self.api_key:
            # Single bounded attempt: a retry could produce a second, different proposal
            self.client = OpenAI(api_key=self.api_key, timeout=timeout, max_retries=0)
        else:
            self.client = None

    def _build_messages(
        self, message: str, snapshot: dict[str, Any], today: date
    ) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": build_system_prompt(today)},
            {"role": "user", "content": self._user_content(message, snapshot)},
        ]

    def propose(
        self, message: str, snapshot: dict[str, Any], today: date | None = None
    ) -> PlanProposal:
        if not self.client:
            raise OracleError("The assistant is not configured (missing OpenAI API key).")
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=self._build_messages(message, snapshot, today or date.today()),
                temperature=0.2,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": "plan_preview", "schema": PROPOSAL_SCHEMA},
                },
            )
        except OpenAIError as exc:
            logger.error(f"OpenAI proposal request failed: {exc}")
            raise OracleError("The assistant is unavailable right now. Please try again.") from exc

        reply = completion.choices[0].message.content
        if not reply:
            raise OracleError("The assistant returned an empty response.")
        return self._parse_proposal(reply)
