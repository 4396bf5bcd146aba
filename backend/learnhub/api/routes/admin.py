"""Admin Routes — on-demand maintenance for teachers."""

import logging

from fastapi import APIRouter, Depends

from learnhub.api.deps import require_role
from learnhub.core.domain_types import RoleName
from learnhub.infrastructure.database import get_db_manager
from learnhub.models.user import User
from learnhub.services.maintenance import run_all_cleanups

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.post("/cleanup")
async def run_cleanup(user: User = Depends(require_role(RoleName.TEACHER.value))):
    """Run the refresh-token and notification expiry jobs now."""
    result = await run_all_cleanups(get_db_manager().session)
    logger.info("Manual cleanup run", extra={"user_id": user.id})
    return result
