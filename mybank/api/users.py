"""
mybank/api/users.py

Purpose: User endpoints

- GET /getUsers returns every stored user document
- POST /addUser stores the request body as a new user document
- Both count toward the request counter, whatever the outcome
"""

import json
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from mybank.api.dependencies import get_metrics, get_user_repository
from mybank.core.logging import LogContext, get_logger
from mybank.core.metrics import HTTP_REQUESTS, USER_INSERTS, MetricsRegistry
from mybank.repositories.user_repository import UserRepository

logger = get_logger(__name__)
router = APIRouter()

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_document(request: Request) -> Dict[str, Any]:
    """
    Reads the request body as a user document.

    JSON objects are used as-is; form fields become keys (repeated fields
    become lists). Anything else, including an empty or undecodable body,
    yields an empty document rather than an error.
    """
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        document: Dict[str, Any] = {}
        for key in form.keys():
            values = [v for v in form.getlist(key) if isinstance(v, str)]
            if not values:
                continue
            document[key] = values[0] if len(values) == 1 else values
        return document

    body = await request.body()
    if not body:
        return {}

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Request body is not JSON, storing empty document")
        return {}

    if not isinstance(payload, dict):
        logger.warning(f"Request body is a JSON {type(payload).__name__}, storing empty document")
        return {}

    return payload


@router.get("/getUsers")
async def get_users(
    request: Request,
    metrics: MetricsRegistry = Depends(get_metrics),
    users: UserRepository = Depends(get_user_repository),
) -> List[Dict[str, Any]]:
    """
    Returns all user documents as a JSON array.
    """
    metrics.increment(HTTP_REQUESTS)

    with LogContext(method=request.method, path=request.url.path):
        documents = await users.list_all()
        logger.info(f"Listed {len(documents)} users")
        return documents


@router.post("/addUser", response_class=PlainTextResponse)
async def add_user(
    request: Request,
    metrics: MetricsRegistry = Depends(get_metrics),
    users: UserRepository = Depends(get_user_repository),
):
    """
    Stores the request body as a new user document.
    """
    metrics.increment(HTTP_REQUESTS)

    with LogContext(method=request.method, path=request.url.path):
        document = await read_document(request)
        logger.debug(f"Received user document: {document}")

        await users.insert_one(document)
        metrics.increment(USER_INSERTS)

    return PlainTextResponse("User added successfully!")
