"""
User resource API routes
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from models.user import safe_validate_create_user
from services.users_service import get_users_service
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
async def list_users(request: Request):
    """List users ordered by name"""
    set_endpoint_context("users.list")

    result = await get_users_service().list_users()
    if not result.success:
        log_store_failure(request, "Error fetching users", result)
        return error_response(500, "Failed to fetch users")

    return JSONResponse(
        status_code=200,
        content=[user.model_dump(mode="json", by_alias=True) for user in result.data]
    )


@router.post("")
async def create_user(request: Request):
    """Create a new user"""
    set_endpoint_context("users.create")

    payload, ok = await read_json_body(request)
    if not ok:
        return error_response(400, "Invalid JSON")

    validation = safe_validate_create_user(payload)
    if not validation.success:
        return validation_failed_response(validation)

    # Duplicate emails surface as a store failure
    result = await get_users_service().create_user(validation.data)
    if not result.success:
        log_store_failure(request, "Error creating user", result)
        return error_response(500, "Failed to create user")

    user = result.record
    logger.info(f"User created: {user.id}")
    return JSONResponse(status_code=201, content=user.model_dump(mode="json", by_alias=True))
