from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from clausecraft.auth import current_user
from clausecraft.errors import ClauseCraftError, ContractTooLong
from clausecraft.pdf_report import build_analysis_pdf
from clausecraft.schemas import AnalysisResult, AnalyzeRequest, GenerateRequest, GeneratedContract, User
from clausecraft.service import ContractService

router = APIRouter(prefix="/api/contracts", tags=["contracts"])

log = logging.getLogger("clausecraft.api.contracts")


def get_service(request: Request) -> ContractService:
    return request.app.state.service


async def _analyze(payload: AnalyzeRequest, service: ContractService) -> AnalysisResult:
    if not payload.content or not payload.content.strip():
        raise HTTPException(status_code=400, detail="Contract content is required")

    try:
        return await service.analyze(payload.content)
    except ContractTooLong as exc:
        log.info("analyze rejected: est_tokens=%d limit=%d", exc.estimated_tokens, exc.limit)
        raise HTTPException(status_code=413, detail=str(exc))
    except Exception as exc:
        # Model failures are absorbed by the pipeline; anything reaching here is a bug
        log.exception("analyze failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to analyze contract")


@router.post("/analyze", response_model=AnalysisResult)
async def analyze(
    payload: AnalyzeRequest,
    service: ContractService = Depends(get_service),
) -> AnalysisResult:
    """
    Risk analysis of pasted or extracted contract text. Not persisted.
    """
    return await _analyze(payload, service)


@router.post("/analyze/report", response_class=StreamingResponse)
async def analyze_report(
    payload: AnalyzeRequest,
    service: ContractService = Depends(get_service),
):
    """
    Same analysis as /analyze, rendered as a downloadable PDF report.
    """
    result = await _analyze(payload, service)
    pdf_bytes = build_analysis_pdf(result, title="Contract Risk Report")
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="clausecraft_risk_report.pdf"'},
    )


@router.post("/generate", response_model=GeneratedContract)
async def generate(
    payload: GenerateRequest,
    request: Request,
    service: ContractService = Depends(get_service),
) -> GeneratedContract:
    if not (payload.type and payload.partyA and payload.partyB):
        raise HTTPException(status_code=400, detail="Contract type and party names are required")

    user: Optional[User] = current_user(request)
    try:
        return await service.generate(
            contract_type=payload.type,
            party_a=payload.partyA,
            party_b=payload.partyB,
            terms=payload.terms,
            owner_id=user.id if user else None,
        )
    except ClauseCraftError as exc:
        log.exception("generate failed: type=%s: %s", payload.type, exc)
        raise HTTPException(status_code=500, detail="Failed to generate contract")
