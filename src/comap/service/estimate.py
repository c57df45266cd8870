from __future__ import annotations

# Orchestration for a single point estimate:
# - gate the query on the sensor bounding box
# - resolve the feed into stationary samples + mobile sensors
# - short-circuit to the mobile sensor when it is close enough
# - otherwise fit the variogram to the live readings and krige
#
# The kriging engine itself never raises; this layer only raises for
# caller errors (query outside bounds).

import logging
import math

from comap.config.settings import Settings
from comap.core.geo import GeoPoint as CoreGeoPoint
from comap.core.geo import haversine_m
from comap.domain.models import (
    BoundsInfo,
    GeoPoint,
    ParametersInfo,
    PointEstimate,
    SensorCounts,
    SensorsOverview,
    SensorView,
    SeverityInfo,
)
from comap.errors import OutOfBoundsError
from comap.interpolation.kriging import interpolate
from comap.interpolation.variogram import VariogramParameters
from comap.scoring.severity import Severity, classify, legend_label
from comap.sensors.feed import ResolvedFeed, SensorSnapshot, split_feed
from comap.sensors.trails import TrailBuffer

logger = logging.getLogger(__name__)


def prior_parameters(settings: Settings) -> VariogramParameters:
    cfg = settings.kriging
    return VariogramParameters(nugget=cfg.nugget, sill=cfg.sill, range_m=cfg.range_m)


def severity_info(band: Severity | None) -> SeverityInfo | None:
    if band is None:
        return None
    return SeverityInfo(name=band.name, color=band.color, lower=band.lower, upper=band.upper, label=legend_label(band))


def resolve_feed(snapshot: SensorSnapshot, settings: Settings) -> ResolvedFeed:
    fallback = settings.sensors.fallback_location
    return split_feed(
        snapshot,
        settings.sensors.station_points(),
        fallback_location=CoreGeoPoint(lat=fallback.lat, lon=fallback.lon) if fallback else None,
    )


def ensure_in_bounds(lat: float, lon: float, settings: Settings) -> CoreGeoPoint:
    """Return the query as a core point, or raise `OutOfBoundsError`."""
    query = CoreGeoPoint(lat=float(lat), lon=float(lon))
    if not settings.sensors.bounding_box().contains(query):
        raise OutOfBoundsError(query.lat, query.lon)
    return query


def estimate_at_point(lat: float, lon: float, snapshot: SensorSnapshot, *, settings: Settings) -> PointEstimate:
    """Estimate the CO level at (lat, lon) from the current snapshot.

    Raises `OutOfBoundsError` when the point lies outside the sensor bounding box;
    the kriging engine is not consulted in that case.
    """
    query = ensure_in_bounds(lat, lon, settings)
    feed = resolve_feed(snapshot, settings)
    samples = feed.samples()
    query_model = GeoPoint(lat=query.lat, lon=query.lon)

    # The mobile sensor only takes over when there are enough fixed samples to krige at all.
    mobile = feed.find_mobile(settings.sensors.mobile_id)
    if (
        mobile is not None
        and mobile.reading.online
        and math.isfinite(mobile.reading.value)
        and len(samples) >= settings.kriging.min_samples
    ):
        distance = haversine_m(query, mobile.location)
        if distance <= settings.override.radius_m:
            logger.debug("Using %s reading (%.1f m away) instead of kriging.", mobile.sensor_id, distance)
            value = max(0.0, mobile.reading.value)
            return PointEstimate(
                query=query_model,
                value=value,
                source="mobile_override",
                severity=severity_info(classify(value, settings.severity)),
                sample_count=len(samples),
                override_sensor_id=mobile.sensor_id,
                override_distance_m=distance,
            )

    value, params = interpolate(
        query,
        samples,
        prior_parameters(settings),
        range_factor=settings.kriging.range_factor,
        sill_floor=settings.kriging.sill_floor,
    )

    if value is None:
        if len(samples) >= 2:
            logger.warning("Kriging produced no estimate at %.6f, %.6f (%d samples).", query.lat, query.lon, len(samples))
        source = "unavailable"
    elif len(samples) == 1:
        source = "single_sample"
    else:
        source = "kriging"

    return PointEstimate(
        query=query_model,
        value=value,
        source=source,
        severity=severity_info(classify(value, settings.severity)),
        parameters=(
            ParametersInfo(nugget=params.nugget, sill=params.sill, range_m=params.range_m, model=params.model)
            if source == "kriging"
            else None
        ),
        sample_count=len(samples),
    )


def sensors_overview(
    snapshot: SensorSnapshot, *, settings: Settings, trails: TrailBuffer | None = None
) -> SensorsOverview:
    """Everything a map needs to draw sensor markers and the mobile trail."""
    feed = resolve_feed(snapshot, settings)

    stationary = [
        SensorView(
            id=s.sensor_id,
            lat=s.location.lat,
            lon=s.location.lon,
            value=s.reading.value,
            online=s.reading.online,
            timestamp=s.reading.timestamp,
            severity=severity_info(classify(s.reading.value, settings.severity)),
        )
        for s in feed.stationary
    ]
    mobile = [
        SensorView(
            id=m.sensor_id,
            lat=m.location.lat,
            lon=m.location.lon,
            value=m.reading.value,
            online=m.reading.online,
            timestamp=m.reading.timestamp,
            severity=severity_info(classify(m.reading.value, settings.severity)),
            mobile=True,
            trail=[GeoPoint(lat=p.lat, lon=p.lon) for p in trails.get(m.sensor_id)] if trails else [],
        )
        for m in feed.mobile
    ]
    return SensorsOverview(
        generated_at=snapshot.generated_at,
        stationary=stationary,
        mobile=mobile,
        counts=SensorCounts(online=snapshot.online_count, total=snapshot.total_count),
    )


def bounds_info(settings: Settings) -> BoundsInfo:
    box = settings.sensors.bounding_box()
    return BoundsInfo(
        corners=[GeoPoint(lat=p.lat, lon=p.lon) for p in settings.sensors.corner_points()],
        min_lat=box.min_lat,
        max_lat=box.max_lat,
        min_lon=box.min_lon,
        max_lon=box.max_lon,
    )
