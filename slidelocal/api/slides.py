"""Slide control endpoints."""

import logging

from fastapi import APIRouter, HTTPException

from ..models import (
    CommandResponse,
    PositionResponse,
    SlideListResponse,
    SlideStatus,
    TargetPositionRequest,
)
from ..rpc import RpcTimeout, SlideError
from ..slide_manager import SlideAccessory, get_slide_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/slides", tags=["slides"])


def _get_accessory(id_or_slug: str) -> SlideAccessory:
    accessory = get_slide_manager().get(id_or_slug)
    if accessory is None:
        raise HTTPException(status_code=404, detail=f"Slide not found: {id_or_slug}")
    return accessory


def _device_error(e: SlideError) -> HTTPException:
    """Map a device failure to a gateway error."""
    if isinstance(e, RpcTimeout):
        return HTTPException(status_code=504, detail=str(e))
    return HTTPException(status_code=502, detail=str(e))


@router.get("", response_model=SlideListResponse)
async def list_slides():
    """List all configured slides with their last known state."""
    accessories = get_slide_manager().list_accessories()
    return SlideListResponse(
        slides=[a.status() for a in accessories],
        count=len(accessories),
    )


@router.get("/{id_or_slug}", response_model=SlideStatus)
async def get_slide(id_or_slug: str):
    """Get a slide by UUID or slug."""
    return _get_accessory(id_or_slug).status()


@router.get("/{id_or_slug}/position", response_model=PositionResponse)
async def get_position(id_or_slug: str):
    """
    Read the live position from the device.

    Returns 0 when the device cannot be reached.
    """
    accessory = _get_accessory(id_or_slug)
    position = await accessory.get_current_position()
    return PositionResponse(id=accessory.slide_id, position=position)


@router.put("/{id_or_slug}/position", response_model=CommandResponse)
async def set_position(id_or_slug: str, request: TargetPositionRequest):
    """
    Move a slide to a target position.

    - position is percent open: 0 = closed, 100 = open
    """
    accessory = _get_accessory(id_or_slug)

    try:
        result = await accessory.set_target_position(request.position)
    except SlideError as e:
        raise _device_error(e)

    return CommandResponse(
        status="moving",
        id=accessory.slide_id,
        message=f"Moving {accessory.name} to {request.position}%",
        result=result,
    )


@router.post("/{id_or_slug}/stop", response_model=CommandResponse)
async def stop_slide(id_or_slug: str):
    """Stop a moving slide."""
    accessory = _get_accessory(id_or_slug)

    try:
        result = await accessory.stop()
    except SlideError as e:
        logger.warning(f"Error stopping {accessory.name}: {e}")
        raise _device_error(e)

    return CommandResponse(
        status="stopped",
        id=accessory.slide_id,
        message=f"Stopped {accessory.name}",
        result=result,
    )


@router.post("/{id_or_slug}/calibrate", response_model=CommandResponse)
async def calibrate_slide(id_or_slug: str):
    """Start calibration of a slide."""
    accessory = _get_accessory(id_or_slug)

    try:
        result = await accessory.calibrate()
    except SlideError as e:
        logger.warning(f"Error calibrating {accessory.name}: {e}")
        raise _device_error(e)

    logger.info(f"Calibration started for {accessory.name}")
    return CommandResponse(
        status="calibrating",
        id=accessory.slide_id,
        message=f"Calibrating {accessory.name}",
        result=result,
    )
