"""Administrative endpoints."""

import logging

from fastapi import APIRouter, Depends, status

from tokenguard.application.dtos.auth_dto import AdminRevokeDTO, ClaimsDTO, RevocationResultDTO
from tokenguard.application.services.auth_service import AuthService
from tokenguard.presentation.dependencies import get_auth_service, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/subjects/{subject_id}/revoke",
    response_model=RevocationResultDTO,
    status_code=status.HTTP_200_OK,
    summary="Revoke all tokens of a subject",
    description="Every token issued to the subject up to now stops validating.",
)
async def revoke_subject(
    subject_id: str,
    dto: AdminRevokeDTO | None = None,
    admin: ClaimsDTO = Depends(require_admin),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Raises:
        401 Unauthorized: Bearer token missing or invalid
        403 Forbidden: Bearer token lacks the admin role
    """
    result = await auth_service.admin_revoke(subject_id, dto or AdminRevokeDTO())
    logger.warning(
        f"Admin {admin.subject_id} revoked all tokens of subject {subject_id} "
        f"(reason={result.reason})"
    )
    return result
