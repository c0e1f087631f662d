from fastapi import APIRouter, Request, Response

from catering.api.routes.sessions import get_session_or_404
from catering.infra.pdf_utils import render_breakdown_pdf
from catering.logic.modifications.detector import modifications_to_dict
from catering.logic.pricing.aggregator import get_pricing_summary

router = APIRouter()


@router.get('/api/sessions/{session_id}/pricing')
def read_pricing(request: Request, session_id: str):
    session = get_session_or_404(request, session_id)
    return session.pricing().to_dict()


@router.get('/api/sessions/{session_id}/pricing/summary')
def read_pricing_summary(request: Request, session_id: str):
    session = get_session_or_404(request, session_id)
    return get_pricing_summary(session.pricing())


@router.get('/api/sessions/{session_id}/modifications')
def read_modifications(request: Request, session_id: str):
    session = get_session_or_404(request, session_id)
    return modifications_to_dict(session.modifications())


@router.get('/api/sessions/{session_id}/breakdown')
def read_breakdown(request: Request, session_id: str):
    session = get_session_or_404(request, session_id)
    return session.breakdown()


@router.get('/api/sessions/{session_id}/breakdown.pdf')
def export_breakdown_pdf(request: Request, session_id: str):
    session = get_session_or_404(request, session_id)
    pdf_bytes = render_breakdown_pdf(session.breakdown(), session.package)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=kitchen_sheet_{session.package.id}.pdf"
        },
    )
