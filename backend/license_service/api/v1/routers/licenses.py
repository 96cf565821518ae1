# license_service/api/v1/routers/licenses.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, Request, Response, status
from tortoise.exceptions import IntegrityError

from license_service.core.validity import LicenseStatus, evaluate
from license_service.models.license_key import LicenseKey
from license_service.schemas.license_key import LicenseKeyIn, LicenseKeyOut, PingOut

router = APIRouter(tags=["licenses"])


@router.get("/ping", response_model=PingOut)
async def ping(request: Request):
    """
    Keep-alive endpoint.

    Returns:
        PingOut: fixed "alive" acknowledgment plus the number of open
        license WebSocket sessions
    """
    return PingOut(connections=len(request.app.state.connections))


@router.get("/licenses", response_model=List[LicenseKeyOut])
async def list_licenses():
    """
    Get all license keys, ordered by id.
    """
    rows = await LicenseKey.all().order_by("id")
    return [LicenseKeyOut.from_model(r) for r in rows]


@router.get("/licenses/check/{key}", response_model=LicenseKeyOut)
async def check_license(key: str):
    """
    Look up a license key and check that it is still valid.

    Args:
        key: License key string

    Returns:
        LicenseKeyOut: The record, if it is unlimited or not yet expired

    Raises:
        HTTPException (404): If no record has this key
        HTTPException (400): If the license has expired
    """
    r = await LicenseKey.get_or_none(key=key)
    if not r:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="KEY_NOT_FOUND")
    if evaluate(r) is LicenseStatus.EXPIRED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="KEY_EXPIRED")
    return LicenseKeyOut.from_model(r)


@router.post(
    "/licenses",
    response_model=LicenseKeyOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_license(body: LicenseKeyIn, request: Request, response: Response):
    """
    Add a license key.

    Returns:
        LicenseKeyOut: The created record with its assigned id. The Location
        header points at the new record.

    Raises:
        HTTPException (400): If the key already exists
    """
    try:
        r = await LicenseKey.create(
            key=body.key,
            app_name=body.appName,
            expiration_date=body.expirationDate,
            is_unlimited=body.isUnlimited,
        )
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "KEY_EXISTS", "message": "License key already exists"},
        )
    response.headers["Location"] = f"{request.url.path.rstrip('/')}/{r.id}"
    return LicenseKeyOut.from_model(r)


@router.put("/licenses/{license_id}", response_model=LicenseKeyOut)
async def update_license(license_id: int, body: LicenseKeyIn):
    """
    Replace all mutable fields of a license key.

    Args:
        license_id: Database ID of the record
        body: New key, application name, expiration date and unlimited flag

    Raises:
        HTTPException (404): If the record does not exist
        HTTPException (400): If the new key belongs to another record
    """
    r = await LicenseKey.get_or_none(id=license_id)
    if not r:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="KEY_NOT_FOUND")

    r.key = body.key
    r.app_name = body.appName
    r.expiration_date = body.expirationDate
    r.is_unlimited = body.isUnlimited
    try:
        await r.save()
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "KEY_EXISTS", "message": "License key already exists"},
        )
    return LicenseKeyOut.from_model(r)


@router.delete("/licenses/{license_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_license(license_id: int):
    """
    Delete a license key.

    Raises:
        HTTPException (404): If the record does not exist
    """
    r = await LicenseKey.get_or_none(id=license_id)
    if not r:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="KEY_NOT_FOUND")
    await r.delete()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
