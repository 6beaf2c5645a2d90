"""
Visitor geolocation from Cloudflare request headers.

Cloudflare adds `cf-ray` (suffixed with the serving colo code) and
`cf-ipcountry` to every proxied request; the "visitor location headers"
managed transform adds `cf-ipcity`, `cf-iplatitude`, `cf-iplongitude` and
`cf-region`. Missing headers fall back to empty strings and (0, 0).
"""

from __future__ import annotations

from typing import Mapping

from visit_counter.domain.models import VisitFacts

RAY_HEADER = "cf-ray"
COUNTRY_HEADER = "cf-ipcountry"
CITY_HEADER = "cf-ipcity"
LATITUDE_HEADER = "cf-iplatitude"
LONGITUDE_HEADER = "cf-iplongitude"
REGION_HEADER = "cf-region"

UNKNOWN_REGION = "unknown region"


def _lowered(headers: Mapping[str, str]) -> dict[str, str]:
    return {key.lower(): value for key, value in headers.items()}


def _coordinate(raw: str | None) -> float:
    if not raw:
        return 0.0
    try:
        return float(raw)
    except ValueError:
        return 0.0


def colo_from_ray(ray: str | None) -> str:
    """`8a1b2c3d4e5f6a7b-WAW` -> `WAW`."""
    if not ray or "-" not in ray:
        return ""
    return ray.rsplit("-", 1)[1]


def visit_facts_from_headers(headers: Mapping[str, str]) -> VisitFacts:
    values = _lowered(headers)
    return VisitFacts(
        airport=colo_from_ray(values.get(RAY_HEADER)),
        country=values.get(COUNTRY_HEADER, ""),
        city=values.get(CITY_HEADER, ""),
        latitude=_coordinate(values.get(LATITUDE_HEADER)),
        longitude=_coordinate(values.get(LONGITUDE_HEADER)),
    )


def region_from_headers(headers: Mapping[str, str]) -> str:
    return _lowered(headers).get(REGION_HEADER) or UNKNOWN_REGION


__all__ = ["visit_facts_from_headers", "region_from_headers", "colo_from_ray"]
