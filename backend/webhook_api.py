# webhook_api.py
"""
Identity-provider webhook: keeps the users table in step with account
lifecycle events (user.created / user.updated / user.deleted).

Payloads are Svix-signed; svix.webhooks.Webhook checks the signature and the
timestamp window before anything touches the database.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from svix.webhooks import Webhook, WebhookVerificationError

import config
from database import create_user, delete_user, get_db, get_user_by_auth_id, get_user_by_email, update_fields
from exceptions import AppException, ConflictError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

SVIX_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


def _profile_fields(data: dict) -> dict:
    primary_id = data.get("primary_email_address_id")
    email = next(
        (e.get("email_address") for e in data.get("email_addresses") or [] if e.get("id") == primary_id),
        None,
    )
    if email:
        email = email.lower().strip()
    full_name = f"{data.get('first_name') or ''} {data.get('last_name') or ''}".strip()
    return {"email": email, "full_name": full_name, "username": data.get("username") or ""}


def _upsert_user(db, auth_id: str, fields: dict):
    if fields["email"]:
        owner = get_user_by_email(db, fields["email"])
        if owner and owner.auth_id != auth_id:
            raise ConflictError("Email already registered", resource="user")

    user = get_user_by_auth_id(db, auth_id)
    try:
        if user:
            return update_fields(db, user, {k: v for k, v in fields.items() if v is not None})
        if not fields["email"]:
            raise ValidationError("User email not found", field="email_addresses")
        return create_user(db, auth_id=auth_id, **fields)
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already registered", resource="user")


@router.post("/identity")
async def handle_identity_webhook(request: Request, db: Session = Depends(get_db)):
    if not config.IDENTITY_WEBHOOK_SECRET:
        logger.error("Missing IDENTITY_WEBHOOK_SECRET")
        raise AppException("Server configuration error", status_code=500, error_code="CONFIG_ERROR")

    headers = {name: request.headers.get(name) for name in SVIX_HEADERS}
    if not all(headers.values()):
        raise ValidationError("Missing svix headers")

    body = await request.body()
    try:
        event = Webhook(config.IDENTITY_WEBHOOK_SECRET).verify(body, headers)
    except WebhookVerificationError as e:
        logger.warning("Webhook verification failed: %s", e)
        raise ValidationError("Webhook verification failed")

    event_type = event.get("type")
    data = event.get("data") or {}
    auth_id = data.get("id")
    logger.info("Received identity webhook: %s (%s)", event_type, auth_id)

    if event_type in ("user.created", "user.updated"):
        _upsert_user(db, auth_id, _profile_fields(data))

    elif event_type == "user.deleted":
        if delete_user(db, auth_id):
            logger.info("User deleted via webhook: %s", auth_id)

    return {"received": True}
