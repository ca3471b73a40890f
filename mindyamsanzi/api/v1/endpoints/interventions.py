import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from mindyamsanzi.api.v1.deps import get_counselor_service
from mindyamsanzi.core.auth import CurrentUser, get_current_user
from mindyamsanzi.core.database import as_uuid
from mindyamsanzi.core.exceptions import ValidationError
from mindyamsanzi.schemas.chat import InterventionRequest
from mindyamsanzi.services.counselor_service import CounselorService

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_triggered(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "intervention_triggered": False})


@router.post("/performance-intervention")
async def performance_intervention(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    counselor: CounselorService = Depends(get_counselor_service)
):
    """Evaluate a grade event and send an outreach message when it warrants one"""
    try:
        payload = InterventionRequest.model_validate(await request.json())
    except (ValueError, PydanticValidationError) as e:
        logger.info(f"Rejected intervention request: {e}")
        return _not_triggered(400, "Invalid intervention request")

    try:
        owner = as_uuid(payload.student_id)
    except ValidationError as e:
        return _not_triggered(400, str(e))

    # students may only trigger outreach for themselves
    if not current_user.is_admin and str(owner) != current_user.id.lower():
        logger.warning(f"User {current_user.id} tried to trigger an intervention for {owner}")
        return _not_triggered(403, "Not enough permissions")

    try:
        result = await counselor.intervene(
            payload.student_id,
            payload.subject,
            payload.new_grade,
            payload.previous_grade
        )
    except ValidationError as e:
        return _not_triggered(400, str(e))
    except Exception as e:
        logger.exception("Error in performance-intervention")
        return _not_triggered(500, str(e) or "Unknown error")

    if not result.triggered:
        return {"intervention_triggered": False, "reason": result.reason}

    return {
        "intervention_triggered": True,
        "message": result.message,
        "subject": result.subject,
        "chat_id": result.chat_id,
    }
