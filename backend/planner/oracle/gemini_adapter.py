from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from planner.core.errors import OracleError
from planner.oracle.adapter import ProposalOracle
from planner.oracle.context_utils import build_system_prompt
from planner.schemas.action import PlanProposal

logger = logging.getLogger(__name__)


class GeminiProposalOracle(ProposalOracle):
    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-1.5-flash",
        timeout: float = 30.0,
        client: Any = None,
    ):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        self.timeout = timeout
        if client is not None:
            self.model = client
        elif self.api_key:
            genai.configure(api_key=self.api_key)
            self.model = genai.GenerativeModel(model)
        else:
            self.model = None

    def _prepare_prompt(self, message: str, snapshot: dict[str, Any], today: date) -> str:
        return build_system_prompt(today) + "\n" + self._user_content(message, snapshot)

    def propose(
        self, message: str, snapshot: dict[str, Any], today: date | None = None
    ) -> PlanProposal:
        if not self.model:
            raise OracleError("The assistant is not configured (missing Gemini API key).")
        try:
            result = self.model.generate_content(
                self._prepare_prompt(message, snapshot, today or date.today()),
                generation_config={"response_mime_type": "application/json"},
                request_options={"timeout": self.timeout},
            )
            reply = result.text
        except (google_exceptions.GoogleAPIError, google_exceptions.RetryError) as exc:
            logger.error(f"Gemini proposal request failed: {exc}")
            raise OracleError("The assistant is unavailable right now. Please try again.") from exc
        except ValueError as exc:
            # result.text raises when the candidate was blocked or empty
            logger.warning(f"Gemini returned no usable text: {exc}")
            raise OracleError("The assistant returned an empty response.") from exc

        json_start = reply.find("{")
        json_end = reply.rfind("}") + 1
        if json_start < 0 or json_end <= json_start:
            raise OracleError("The assistant returned malformed JSON.")
        return self._parse_proposal(reply[json_start:json_end])
