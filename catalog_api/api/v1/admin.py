from http import HTTPStatus
from fastapi import APIRouter, Depends, Response

from catalog_api.dependencies import admin_role_header, get_engagement_service
from catalog_api.services.engagement_service import EngagementService
from catalog_api.models.comments import RecountResponse
from catalog_api.api.http_utils import handle_domain_errors

router = APIRouter(prefix="/api/v1/admin", tags=["admin"],
                   dependencies=[Depends(admin_role_header)])


@router.delete("/comments/{comment_id}", status_code=HTTPStatus.NO_CONTENT)
@handle_domain_errors()
async def delete_comment(
    comment_id: str,
    svc: EngagementService = Depends(get_engagement_service),
) -> Response:
    await svc.admin_delete_comment(comment_id)
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.delete("/users/{username}/comments",
               status_code=HTTPStatus.NO_CONTENT)
@handle_domain_errors()
async def delete_all_user_comments(
    username: str,
    svc: EngagementService = Depends(get_engagement_service),
) -> Response:
    await svc.admin_delete_user_comments(username)
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.post("/comments/{comment_id}/recount",
             response_model=RecountResponse,
             status_code=HTTPStatus.OK)
@handle_domain_errors()
async def recount_comment(
    comment_id: str,
    svc: EngagementService = Depends(get_engagement_service),
):
    return await svc.recount_comment(comment_id)
