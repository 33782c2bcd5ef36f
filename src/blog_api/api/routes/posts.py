"""
Blog post API routes
All store access goes through the posts service layer.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Response

from blog_api.models.post import (
    BlogPost,
    BlogPostCreateRequest,
    BlogPostResponse,
    BlogPostUpdateRequest,
)
from blog_api.services.base_service import ServiceResult
from blog_api.services.posts_service import get_posts_service

router = APIRouter()
logger = logging.getLogger(__name__)


def raise_for_result(result: ServiceResult, not_found_detail: str = "Post not found") -> None:
    """Translate a failed ServiceResult into an HTTPException"""
    if result.success:
        return
    if result.error_type == "RESOURCE_NOT_FOUND":
        raise HTTPException(status_code=404, detail=not_found_detail)
    if result.error_type == "INVALID_QUERY":
        raise HTTPException(status_code=400, detail=result.error)
    # Store details stay in the logs
    logger.error(f"Posts service failure ({result.error_type}): {result.error}")
    raise HTTPException(status_code=500, detail="Internal database error")


@router.get("", response_model=List[BlogPostResponse])
async def list_posts():
    """List every post in natural order"""
    result = await get_posts_service().list_posts()
    raise_for_result(result)
    return [BlogPost(**document).serialize() for document in result.data]


@router.get("/{post_id}", response_model=BlogPostResponse)
async def get_post(post_id: str):
    result = await get_posts_service().get_post_by_id(post_id)
    raise_for_result(result)
    return BlogPost(**result.data[0]).serialize()


@router.post("", status_code=201, response_model=BlogPostResponse)
async def create_post(request: BlogPostCreateRequest):
    """Create a new post"""
    result = await get_posts_service().create_post(request)
    raise_for_result(result)
    return BlogPost(**result.data[0]).serialize()


@router.put("/{post_id}", status_code=204)
async def update_post(post_id: str, request: BlogPostUpdateRequest):
    """Partially update a post; only the supplied fields change"""
    result = await get_posts_service().update_post(post_id, request)
    raise_for_result(result)
    return Response(status_code=204)


@router.delete("/{post_id}", status_code=204)
async def delete_post(post_id: str):
    result = await get_posts_service().delete_post(post_id)
    raise_for_result(result)
    return Response(status_code=204)
