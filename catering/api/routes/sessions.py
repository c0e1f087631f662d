import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from catering.logic.session import CateringSession
from catering.utilities.validators import (
    AddOnsInput, DistributionInput, PackageSwitchInput, SelectionsInput, SessionCreateInput,
    SkipInput, SmartDefaultsInput, SplitInput, StatePatchInput
)

router = APIRouter()
logger = logging.getLogger("catering_app")


def get_session_or_404(request: Request, session_id: str) -> CateringSession:
    try:
        return request.app.state.registry.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Session not found")


def _session_payload(session_id: str, session: CateringSession) -> dict:
    return {"session_id": session_id, "package_id": session.package.id, "config": session.to_dict()}


@router.post('/api/sessions')
def create_session(request: Request, payload: SessionCreateInput):
    session_id, session = request.app.state.registry.create(
        payload.package_id,
        guest_count=payload.guest_count,
        percentages=payload.percentages,
        restore=payload.restore,
    )
    return _session_payload(session_id, session)


@router.get('/api/sessions/{session_id}')
def read_session(request: Request, session_id: str):
    return _session_payload(session_id, get_session_or_404(request, session_id))


@router.delete('/api/sessions/{session_id}')
def delete_session(request: Request, session_id: str):
    """Close a session and release its subscriptions. Saved configs are kept."""
    try:
        request.app.state.registry.close(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}


@router.put('/api/sessions/{session_id}/package')
def switch_package(request: Request, session_id: str, payload: PackageSwitchInput):
    """Start the session over on another package (defaults reset, guest count kept)."""
    get_session_or_404(request, session_id)
    session = request.app.state.registry.switch_package(session_id, payload.package_id)
    return _session_payload(session_id, session)


@router.patch('/api/sessions/{session_id}/state')
def patch_state(request: Request, session_id: str, payload: StatePatchInput):
    """Update unit style, guest count and/or sauce assignments."""
    session = get_session_or_404(request, session_id)
    if payload.unit_style is not None:
        session.set_unit_style(payload.unit_style)
    if payload.guest_count is not None:
        session.set_guest_count(payload.guest_count)
    if payload.assignments is not None:
        session.set_assignments([a.model_dump(exclude_none=True) for a in payload.assignments])
    return _session_payload(session_id, session)


@router.put('/api/sessions/{session_id}/distribution')
def put_distribution(request: Request, session_id: str, payload: DistributionInput):
    session = get_session_or_404(request, session_id)
    session.set_distribution(payload.distribution)
    return _session_payload(session_id, session)


@router.post('/api/sessions/{session_id}/split')
def adjust_split(request: Request, session_id: str, payload: SplitInput):
    """Change one unit type; its sibling in the same group absorbs the difference."""
    session = get_session_or_404(request, session_id)
    try:
        distribution = session.adjust_split(payload.unit_type, payload.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"distribution": distribution}


@router.post('/api/sessions/{session_id}/smart-defaults')
def smart_defaults(request: Request, session_id: str, payload: SmartDefaultsInput):
    session = get_session_or_404(request, session_id)
    distribution = session.apply_smart_defaults(payload.percentages)
    return {"distribution": distribution, "locked_baseline": session.config.locked_baseline}


@router.put('/api/sessions/{session_id}/selections/{category}')
def put_selections(request: Request, session_id: str, category: str, payload: SelectionsInput):
    session = get_session_or_404(request, session_id)
    session.set_pack_selections(category, [s.model_dump(exclude_none=True) for s in payload.selections])
    return _session_payload(session_id, session)


@router.post('/api/sessions/{session_id}/skip/{category}')
def skip_category(request: Request, session_id: str, category: str, payload: Optional[SkipInput] = None):
    """Skip or restore a pack category. Without a body the flag is toggled."""
    session = get_session_or_404(request, session_id)
    skipped = session.toggle_skip(category, payload.skip if payload is not None else None)
    return {"category": category, "skipped": skipped, "config": session.to_dict()}


@router.put('/api/sessions/{session_id}/add-ons/{category}')
def put_add_ons(request: Request, session_id: str, category: str, payload: AddOnsInput):
    session = get_session_or_404(request, session_id)
    session.set_add_ons(category, [a.model_dump(exclude_none=True) for a in payload.add_ons])
    return _session_payload(session_id, session)


@router.post('/api/sessions/{session_id}/save')
def save_session(request: Request, session_id: str):
    get_session_or_404(request, session_id)
    request.app.state.registry.save(session_id)
    logger.info(f"Session {session_id} saved")
    return {"success": True}
