"""
FastAPI router for ICP and persona classification.

Endpoints:
- POST /scoring/icp: classify one company against the ICP profile
- POST /scoring/icp/batch: classify many companies, input order preserved
- POST /scoring/persona: pick the best persona for one contact
- POST /scoring/persona/batch: pick personas for many contacts

Classification is stateless; nothing posted here is stored.
"""

import logging
from typing import List

from fastapi import APIRouter
from pydantic import BaseModel, Field

from intent_unifier.core.dependencies import EngineDep
from intent_unifier.models.schemas import AttributeMap, MatchResult


logger = logging.getLogger(__name__)


# =============================================================================
# Local Pydantic Models for API Requests / Responses
# =============================================================================

class CompanyRequest(BaseModel):
    companyData: AttributeMap = Field(..., description="Company attribute map")


class CompanyBatchRequest(BaseModel):
    companies: List[AttributeMap] = Field(..., description="Company attribute maps")


class ContactRequest(BaseModel):
    contactData: AttributeMap = Field(..., description="Contact attribute map")


class ContactBatchRequest(BaseModel):
    contacts: List[AttributeMap] = Field(..., description="Contact attribute maps")


class MatchResponse(BaseModel):
    success: bool = True
    result: MatchResult


class MatchBatchResponse(BaseModel):
    success: bool = True
    count: int = Field(..., ge=0)
    results: List[MatchResult] = Field(default_factory=list)


# =============================================================================
# Router Definition
# =============================================================================

router = APIRouter()


@router.post("/icp", response_model=MatchResponse)
def score_icp(request: CompanyRequest, engine: EngineDep) -> MatchResponse:
    """
    Classify a company into an ICP tier (A-D).

    Returns:
        MatchResponse with score, tier and per-criterion detail.
    """
    return MatchResponse(result=engine.classify_company(request.companyData))


@router.post("/icp/batch", response_model=MatchBatchResponse)
def score_icp_batch(request: CompanyBatchRequest, engine: EngineDep) -> MatchBatchResponse:
    results = [engine.classify_company(company) for company in request.companies]
    logger.info(f"Classified {len(results)} compan(ies) against the ICP profile")
    return MatchBatchResponse(count=len(results), results=results)


@router.post("/persona", response_model=MatchResponse)
def score_persona(request: ContactRequest, engine: EngineDep) -> MatchResponse:
    """
    Pick the best-scoring persona for a contact.

    Returns:
        MatchResponse whose classification is the persona name, with every
        profile's score under profileScores.
    """
    return MatchResponse(result=engine.classify_contact(request.contactData))


@router.post("/persona/batch", response_model=MatchBatchResponse)
def score_persona_batch(request: ContactBatchRequest, engine: EngineDep) -> MatchBatchResponse:
    results = [engine.classify_contact(contact) for contact in request.contacts]
    logger.info(f"Classified {len(results)} contact(s) against persona profiles")
    return MatchBatchResponse(count=len(results), results=results)
