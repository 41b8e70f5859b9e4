"""
Post resource API routes
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from models.post import safe_validate_create_post
from services.posts_service import get_posts_service
from utils.error_handling import (
    error_response,
    log_store_failure,
    read_json_body,
    set_endpoint_context,
    validation_failed_response,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def list_posts(
    request: Request,
    author: Optional[str] = Query(None, description="Exact match on author name"),
    search: Optional[str] = Query(None, description="Substring match on title"),
):
    """List posts, newest first"""
    set_endpoint_context("posts.list")
    posts_service = get_posts_service()

    if author is not None:
        result = await posts_service.get_posts_by_author(author)
    elif search is not None:
        result = await posts_service.search_posts(search)
    else:
        result = await posts_service.list_posts()

    if not result.success:
        log_store_failure(request, "Error fetching posts", result)
        return error_response(500, "Failed to fetch posts")

    return JSONResponse(
        status_code=200,
        content=[post.model_dump(mode="json", by_alias=True) for post in result.data]
    )


@router.post("")
async def create_post(request: Request):
    """Create a new post"""
    set_endpoint_context("posts.create")

    payload, ok = await read_json_body(request)
    if not ok:
        return error_response(400, "Invalid JSON")

    validation = safe_validate_create_post(payload)
    if not validation.success:
        return validation_failed_response(validation)

    result = await get_posts_service().create_post(validation.data)
    if not result.success:
        log_store_failure(request, "Error creating post", result)
        return error_response(500, "Failed to create post")

    post = result.record
    logger.info(f"Post created: {post.id}")
    return JSONResponse(status_code=201, content=post.model_dump(mode="json", by_alias=True))
