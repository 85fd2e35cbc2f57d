from functools import lru_cache

from planner.core.config import get_settings
from planner.oracle.adapter import ProposalOracle
from planner.oracle.gemini_adapter import GeminiProposalOracle
from planner.oracle.openai_adapter import OpenAIProposalOracle


@lru_cache
def get_proposal_oracle() -> ProposalOracle:
    settings = get_settings()
    if settings.ai_provider == "gemini":
        return GeminiProposalOracle(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timeout=settings.oracle_timeout_seconds,
        )
    return OpenAIProposalOracle(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout=settings.oracle_timeout_seconds,
    )
