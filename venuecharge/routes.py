"""
HTTP routes for the site backend API.
"""

from __future__ import annotations

import logging
import re
from typing import Type, TypeVar

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ValidationError

from venuecharge.db import StorageClient
from venuecharge.dependencies import get_storage_client
from venuecharge.errors import SERVER_ERROR_MESSAGE, ApiError
from venuecharge.schemas import (
    Advertiser,
    ContactForm,
    ContactSubmitResponse,
    ErrorResponse,
    InsertAdvertiser,
    InsertVenue,
    Venue,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ModelT = TypeVar("ModelT", bound=BaseModel)

# Leading integer, trailing characters ignored ("12abc" -> 12).
_ID_PATTERN = re.compile(r"\s*([+-]?\d+)")

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}
_LOOKUP_ERROR_RESPONSES = {**_ERROR_RESPONSES, 404: {"model": ErrorResponse}}


async def _parse_body(request: Request, model: Type[ModelT], message: str) -> ModelT:
    try:
        data = await request.json()
    except ValueError:
        raise ApiError(
            400,
            message,
            errors=[{"type": "json_invalid", "loc": ["body"], "msg": "Invalid JSON"}],
        )
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ApiError.from_validation(exc, message)


def _parse_id(raw: str) -> int:
    match = _ID_PATTERN.match(raw)
    if not match:
        raise ApiError(400, "Invalid ID format")
    return int(match.group(1))


@router.post(
    "/contact", response_model=ContactSubmitResponse, responses=_ERROR_RESPONSES
)
async def submit_contact_form(
    request: Request, storage: StorageClient = Depends(get_storage_client)
):
    form = await _parse_body(request, ContactForm, "Invalid form data")
    try:
        await storage.create_contact_submission(form)
    except Exception:
        logger.exception("Error processing contact form")
        raise ApiError(500, SERVER_ERROR_MESSAGE)
    return ContactSubmitResponse()


@router.post(
    "/venues", response_model=Venue, status_code=201, responses=_ERROR_RESPONSES
)
async def create_venue(
    request: Request, storage: StorageClient = Depends(get_storage_client)
):
    payload = await _parse_body(request, InsertVenue, "Invalid venue data")
    try:
        venue = await storage.create_venue(payload)
    except Exception:
        logger.exception("Error creating venue")
        raise ApiError(500, SERVER_ERROR_MESSAGE)
    return Venue(**venue.as_dict())


@router.get(
    "/venues", response_model=list[Venue], responses={500: {"model": ErrorResponse}}
)
async def list_venues(storage: StorageClient = Depends(get_storage_client)):
    try:
        venues = await storage.get_venues()
    except Exception:
        logger.exception("Error fetching venues")
        raise ApiError(500, SERVER_ERROR_MESSAGE)
    return [Venue(**venue.as_dict()) for venue in venues]


@router.get(
    "/venues/{venue_id}", response_model=Venue, responses=_LOOKUP_ERROR_RESPONSES
)
async def get_venue(
    venue_id: str, storage: StorageClient = Depends(get_storage_client)
):
    parsed_id = _parse_id(venue_id)
    try:
        venue = await storage.get_venue(parsed_id)
    except Exception:
        logger.exception("Error fetching venue %s", parsed_id)
        raise ApiError(500, SERVER_ERROR_MESSAGE)
    if venue is None:
        raise ApiError(404, "Venue not found")
    return Venue(**venue.as_dict())


@router.post(
    "/advertisers",
    response_model=Advertiser,
    status_code=201,
    responses=_ERROR_RESPONSES,
)
async def create_advertiser(
    request: Request, storage: StorageClient = Depends(get_storage_client)
):
    payload = await _parse_body(request, InsertAdvertiser, "Invalid advertiser data")
    try:
        advertiser = await storage.create_advertiser(payload)
    except Exception:
        logger.exception("Error creating advertiser")
        raise ApiError(500, SERVER_ERROR_MESSAGE)
    return Advertiser(**advertiser.as_dict())


@router.get(
    "/advertisers",
    response_model=list[Advertiser],
    responses={500: {"model": ErrorResponse}},
)
async def list_advertisers(storage: StorageClient = Depends(get_storage_client)):
    try:
        advertisers = await storage.get_advertisers()
    except Exception:
        logger.exception("Error fetching advertisers")
        raise ApiError(500, SERVER_ERROR_MESSAGE)
    return [Advertiser(**advertiser.as_dict()) for advertiser in advertisers]


@router.get(
    "/advertisers/{advertiser_id}",
    response_model=Advertiser,
    responses=_LOOKUP_ERROR_RESPONSES,
)
async def get_advertiser(
    advertiser_id: str, storage: StorageClient = Depends(get_storage_client)
):
    parsed_id = _parse_id(advertiser_id)
    try:
        advertiser = await storage.get_advertiser(parsed_id)
    except Exception:
        logger.exception("Error fetching advertiser %s", parsed_id)
        raise ApiError(500, SERVER_ERROR_MESSAGE)
    if advertiser is None:
        raise ApiError(404, "Advertiser not found")
    return Advertiser(**advertiser.as_dict())
