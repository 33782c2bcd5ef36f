"""
Posts service - business logic for blog posts
"""

import logging
from typing import Any, Dict, Optional

from blog_api.models.post import BlogPostCreateRequest, BlogPostUpdateRequest
from blog_api.services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

BLOG_POSTS_COLLECTION = "blogposts"


class PostsService(BaseService):
    """Service for blog post operations"""

    def __init__(self):
        super().__init__(BLOG_POSTS_COLLECTION)

    async def create_post(self, request: BlogPostCreateRequest) -> ServiceResult:
        """
        Create a new post

        Args:
            request: Validated title, content and structured author

        Returns:
            ServiceResult with the stored post, including id and created
        """
        post_data: Dict[str, Any] = {
            "title": request.title,
            "content": request.content,
            "author": {
                "firstName": request.author.firstName,
                "lastName": request.author.lastName,
            },
        }

        logger.info(f"Creating new post: {request.title}")
        return await self.create(post_data)

    async def list_posts(self) -> ServiceResult:
        return await self.read()

    async def get_post_by_id(self, post_id: str) -> ServiceResult:
        return await self.get_by_id(post_id)

    async def update_post(self, post_id: str, request: BlogPostUpdateRequest) -> ServiceResult:
        """
        Apply a partial update to a post

        The path id is authoritative: a body id, when present, must match it.
        Only the supplied fields are written; id and created never are.
        """
        if request.id is not None and request.id != post_id:
            return ServiceResult(
                success=False,
                error=f"Request path id ({post_id}) and request body id ({request.id}) must match",
                error_type="INVALID_QUERY"
            )

        updates = request.to_update_fields()
        logger.info(f"Updating post {post_id}: fields {sorted(updates)}")
        return await self.update(post_id, updates)

    async def delete_post(self, post_id: str) -> ServiceResult:
        logger.info(f"Deleting post {post_id}")
        return await self.delete(post_id)

    async def count_posts(self) -> ServiceResult:
        return await self.count()


# Global service instance
_posts_service: Optional[PostsService] = None


def get_posts_service() -> PostsService:
    """Get the global posts service instance"""
    global _posts_service
    if _posts_service is None:
        _posts_service = PostsService()
    return _posts_service
