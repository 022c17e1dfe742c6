"""
Newsletter endpoints.

Every endpoint answers with a plain-text status tag.

Endpoints (POST, each with aliases):
- /signup, /subscribe, /join - Subscribe to a list
- /optout, /unsubscribe, /leave - Unsubscribe from a list
- /verify, /confirm - Confirm an email address with a token

Bodies are accepted as JSON or as form data. GET /confirm (and /verify)
takes token and hostname from the query string; it is the link sent in
confirmation emails.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ValidationError, field_validator
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from src.api.deps import get_newsletter_context
from src.components.newsletter import (
    ConfirmInput,
    NewsletterContext,
    SubscribeInput,
    UnsubscribeInput,
    confirm_email,
    is_valid_email,
    subscribe,
    unsubscribe,
)
from src.core.result import Err, Ok, Result, Unreachable, is_ok

logger = logging.getLogger(__name__)

router = APIRouter()

BodyError = Literal["INVALID_JSON", "INVALID_FORMDATA"]

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

SUBSCRIBE_STATUS = {
    "RESUBSCRIBED": 200,
    "ALREADY_SUBSCRIBED": 400,
    "UNKNOWN_HOSTNAME": 400,
}

UNSUBSCRIBE_STATUS = {
    "ALREADY_UNSUBSCRIBED": 200,
    "NOT_FOUND": 404,
    "UNKNOWN_HOSTNAME": 400,
}

CONFIRM_STATUS = {
    "TOKEN_NOT_FOUND": 400,
    "TOKEN_EXPIRED": 400,
    "ALREADY_CONFIRMED": 200,
    "UNKNOWN_HOSTNAME": 400,
}


# --- Request Models ---


class SubscribeRequest(BaseModel):
    email: str
    hostname: str
    list_name: str
    person_name: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Invalid email")
        return v


class UnsubscribeRequest(BaseModel):
    email: str
    hostname: str
    list_name: str


class ConfirmRequest(BaseModel):
    token: str
    hostname: str


# --- Helper Functions ---


async def read_body(request: Request) -> Result[dict[str, Any] | None, BodyError]:
    """
    Decode the request body by content type.

    Returns Ok(None) for content types other than JSON and form data so
    that schema validation reports the missing fields.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type == "application/json":
        try:
            return Ok(await request.json())
        except ValueError:
            return Err("INVALID_JSON")

    if content_type in FORM_CONTENT_TYPES:
        try:
            form = await request.form()
        except (MultiPartException, StarletteHTTPException):
            return Err("INVALID_FORMDATA")
        return Ok({k: v for k, v in form.items() if isinstance(v, str)})

    return Ok(None)


def parse_request(model: type[BaseModel], body: Any) -> Any:
    """Validate a decoded body, surfacing failures as request validation errors."""
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from None


def text_response(tag: str, status_map: dict[str, int]) -> PlainTextResponse:
    if tag not in status_map:
        raise Unreachable(tag)
    return PlainTextResponse(tag, status_code=status_map[tag])


def confirm_response(ctx: NewsletterContext, token: str, hostname: str) -> PlainTextResponse:
    result = confirm_email(ctx, ConfirmInput(token=token, hostname=hostname))

    if is_ok(result):
        return PlainTextResponse("EMAIL_CONFIRMED")
    logger.info("Email confirmation failed: %s", result.error)
    return text_response(result.error, CONFIRM_STATUS)


# --- Endpoints ---


@router.post("/subscribe")
@router.post("/signup", include_in_schema=False)
@router.post("/join", include_in_schema=False)
async def subscribe_endpoint(
    request: Request,
    ctx: NewsletterContext = Depends(get_newsletter_context),
) -> PlainTextResponse:
    """Subscribe an email address to a hostname's list."""
    body = await read_body(request)
    if isinstance(body, Err):
        return PlainTextResponse(body.error, status_code=400)

    req = parse_request(SubscribeRequest, body.value)
    result = subscribe(
        ctx,
        SubscribeInput(
            email=req.email,
            hostname=req.hostname,
            list_name=req.list_name,
            person_name=req.person_name,
        ),
    )

    if is_ok(result):
        return PlainTextResponse("SUBSCRIBED")
    return text_response(result.error, SUBSCRIBE_STATUS)


@router.post("/unsubscribe")
@router.post("/optout", include_in_schema=False)
@router.post("/leave", include_in_schema=False)
async def unsubscribe_endpoint(
    request: Request,
    ctx: NewsletterContext = Depends(get_newsletter_context),
) -> PlainTextResponse:
    """Unsubscribe an email address from a hostname's list."""
    body = await read_body(request)
    if isinstance(body, Err):
        return PlainTextResponse(body.error, status_code=400)

    req = parse_request(UnsubscribeRequest, body.value)
    result = unsubscribe(
        ctx,
        UnsubscribeInput(email=req.email, hostname=req.hostname, list_name=req.list_name),
    )

    if is_ok(result):
        return PlainTextResponse("UNSUBSCRIBED")
    return text_response(result.error, UNSUBSCRIBE_STATUS)


@router.post("/confirm")
@router.post("/verify", include_in_schema=False)
async def confirm_endpoint(
    request: Request,
    ctx: NewsletterContext = Depends(get_newsletter_context),
) -> PlainTextResponse:
    """Confirm an email address with a verification token."""
    body = await read_body(request)
    if isinstance(body, Err):
        return PlainTextResponse(body.error, status_code=400)

    req = parse_request(ConfirmRequest, body.value)
    return confirm_response(ctx, req.token, req.hostname)


@router.get("/confirm")
@router.get("/verify", include_in_schema=False)
async def confirm_link_endpoint(
    token: str,
    hostname: str,
    ctx: NewsletterContext = Depends(get_newsletter_context),
) -> PlainTextResponse:
    """Confirm an email address from the link in the confirmation email."""
    return confirm_response(ctx, token, hostname)


@router.api_route(
    "/{path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def not_found() -> PlainTextResponse:
    return PlainTextResponse("Not found", status_code=404)
