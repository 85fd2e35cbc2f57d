"""Domain errors surfaced to API clients as ``{"error": ...}`` responses."""

from __future__ import annotations

from fastapi import status


class PlannerError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailedError(PlannerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input."


class NotFoundError(PlannerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class ConfirmationRequiredError(PlannerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Confirmation required. Type 'confirmo' to apply."


class MissingTokenError(PlannerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing confirmation token."


class TokenMismatchError(PlannerError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Confirmation token does not match the proposed action."


class NoPendingProposalError(PlannerError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "There is no pending proposal to apply."


class OracleError(PlannerError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "The assistant could not produce a proposal."


class StateVersionError(PlannerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Stored planner state has an unsupported version."
