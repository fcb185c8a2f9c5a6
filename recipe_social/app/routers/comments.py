from __future__ import annotations

from fastapi import APIRouter, Depends

from recipe_social.app.deps import get_comment_service
from recipe_social.app.schemas.comments import CommentEnvelope, CommentUpdate, comment_to_response
from recipe_social.app.schemas.common import SuccessResponse
from recipe_social.app.services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/{comment_id}", response_model=CommentEnvelope)
async def get_comment(
    comment_id: str,
    comments: CommentService = Depends(get_comment_service),
) -> CommentEnvelope:
    return CommentEnvelope(message="Found comment", data=comment_to_response(comments.get_comment(comment_id)))


@router.put("/{comment_id}", response_model=CommentEnvelope)
async def edit_comment(
    comment_id: str,
    payload: CommentUpdate,
    comments: CommentService = Depends(get_comment_service),
) -> CommentEnvelope:
    comment = comments.edit_comment(comment_id, payload.text)
    return CommentEnvelope(message="Comment updated successfully", data=comment_to_response(comment))


@router.delete("/{comment_id}", response_model=SuccessResponse)
async def delete_comment(
    comment_id: str,
    comments: CommentService = Depends(get_comment_service),
) -> SuccessResponse:
    comments.delete_comment(comment_id)
    return SuccessResponse(message="Comment deleted successfully")
