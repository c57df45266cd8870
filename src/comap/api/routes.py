"""
API routes.

Endpoints:
- GET  `/api/sensors`: current readings (stationary + mobile with trail).
- GET  `/api/bounds`: query polygon corners and the derived bounding box.
- POST `/api/estimate`: CO estimate at a point inside the bounds.
- GET  `/api/severity-bands`: legend for the map.
- GET  `/api/settings`: public settings for the web UI.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, HTTPException

from comap.config.overrides import apply_settings_overrides
from comap.config.settings import get_settings
from comap.domain.models import BoundsInfo, EstimateRequest, PointEstimate, SensorsOverview
from comap.errors import OutOfBoundsError
from comap.scoring.severity import legend_label, severity_bands
from comap.sensors.feed import LiveFeed
from comap.sensors.simulator import SensorSimulator
from comap.sensors.trails import TrailBuffer
from comap.service.estimate import bounds_info, estimate_at_point, sensors_overview

router = APIRouter()


@lru_cache
def _trails() -> TrailBuffer:
    return TrailBuffer(max_points=get_settings().sensors.trail_max_points)


@lru_cache
def _feed() -> LiveFeed:
    settings = get_settings()
    feed = LiveFeed(SensorSimulator(settings), refresh_seconds=settings.sensors.refresh_seconds)
    feed.subscribe(_trails().record)
    return feed


@router.get("/api/sensors", response_model=SensorsOverview)
def get_sensors() -> SensorsOverview:
    """Return the latest snapshot, refreshing the feed if it is stale."""
    snapshot = _feed().current()
    return sensors_overview(snapshot, settings=get_settings(), trails=_trails())


@router.get("/api/bounds", response_model=BoundsInfo)
def get_bounds() -> BoundsInfo:
    return bounds_info(get_settings())


@router.post("/api/estimate", response_model=PointEstimate)
def post_estimate(request: EstimateRequest) -> PointEstimate:
    """Estimate CO at the requested point.

    A `value` of null means no estimate is available, which is different from 0 ppm.
    """
    try:
        settings = apply_settings_overrides(get_settings(), request.settings_overrides)
        snapshot = _feed().current()
        return estimate_at_point(request.lat, request.lon, snapshot, settings=settings)
    except OutOfBoundsError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "OUT_OF_BOUNDS", "message": str(e)},
        ) from e
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": str(e)},
        ) from e
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail={"code": "INTERNAL_ERROR", "message": str(e)},
        ) from e


@router.get("/api/severity-bands")
def get_severity_bands() -> dict:
    bands = severity_bands(get_settings().severity)
    return {
        "bands": [
            {"name": b.name, "color": b.color, "lower": b.lower, "upper": b.upper, "label": legend_label(b)}
            for b in bands
        ]
    }


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return safe-to-expose settings for UI defaults."""
    data = get_settings().model_dump(mode="json")
    sensors = data.get("sensors", {})
    return {
        "app": {"name": data["app"]["name"], "timezone": data["app"]["timezone"]},
        "sensors": {
            "mobile_id": sensors.get("mobile_id"),
            "refresh_seconds": sensors.get("refresh_seconds"),
            "trail_max_points": sensors.get("trail_max_points"),
            "stations": sensors.get("stations", {}),
        },
        "kriging": data.get("kriging", {}),
        "override": data.get("override", {}),
    }
