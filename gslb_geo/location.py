#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Geographical locations, great-circle distances and nearest-site search.

A location with both coordinates equal to zero stands for an unknown
location. Distances involving an unknown location are `MAX_DISTANCE`,
which is larger than any distance between two points on Earth, so unknown
candidates never win a nearest-site search.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

__all__ = [
    "EARTH_RADIUS_KM",
    "MAX_DISTANCE",
    "Location",
    "UNKNOWN_LOCATION",
    "NOT_FOUND",
    "location_from_coordinates",
    "is_unknown",
    "distance",
    "distances",
    "nearest",
    "average_location",
]

EARTH_RADIUS_KM = 6371.0
MAX_DISTANCE = 10_000_000.0


@dataclass(frozen=True)
class Location:
    """Represents a geographical coordinate in degrees."""

    lat: float
    long: float

    def is_unknown(self) -> bool:
        """Returns True if this is the unknown-location sentinel."""
        return self.lat == 0 and self.long == 0

    def distance(self, other: Location) -> float:
        """Great-circle distance in km to `other`."""
        return distance(self, other)

    def nearest(self, candidates: Sequence[Location]) -> Tuple[int, Location]:
        """Index and value of the candidate closest to this location."""
        return nearest(self, candidates)


UNKNOWN_LOCATION = Location(lat=0.0, long=0.0)
NOT_FOUND = (-1, UNKNOWN_LOCATION)


def location_from_coordinates(
    lat: Optional[float], long: Optional[float]
) -> Location:
    """
    Builds a location from a latitude/longitude pair.

    Missing (None or NaN) coordinates produce the unknown location.
    """
    if lat is None or long is None or math.isnan(lat) or math.isnan(long):
        return UNKNOWN_LOCATION
    return Location(lat=float(lat), long=float(long))


def is_unknown(location: Location) -> bool:
    """Returns True if `location` is the unknown-location sentinel."""
    return location.is_unknown()


def distance(loc1: Location, loc2: Location) -> float:
    """
    Computes the haversine distance in km between two locations.

    Args:
        loc1: the first location
        loc2: the second location

    Returns:
        The great-circle distance, or `MAX_DISTANCE` if either location
        is unknown.
    """
    if loc1.is_unknown() or loc2.is_unknown():
        return MAX_DISTANCE

    lat1 = math.radians(loc1.lat)
    lat2 = math.radians(loc2.lat)
    dlat = math.radians(loc2.lat - loc1.lat)
    dlong = math.radians(loc2.long - loc1.long)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlong / 2) ** 2
    )
    h = min(h, 1.0)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distances(reference: Location, table: np.ndarray) -> np.ndarray:
    """
    Vectorised version of `distance` over a location table.

    Args:
        reference: the location to measure from
        table: array of shape (N, 2) holding latitude and longitude per row

    Returns:
        Array of N distances in km. Unknown rows, or every row when the
        reference is unknown, get `MAX_DISTANCE`.

    Raises:
        ValueError: if `table` is not of shape (N, 2)
    """
    table = np.asarray(table, dtype=np.float64)
    if table.ndim != 2 or table.shape[1] != 2:
        raise ValueError(f"location table must have shape (N, 2), got {table.shape}")
    if reference.is_unknown():
        return np.full(len(table), MAX_DISTANCE)

    lat1 = math.radians(reference.lat)
    lat2 = np.radians(table[:, 0])
    dlat = lat2 - lat1
    dlong = np.radians(table[:, 1] - reference.long)

    h = np.sin(dlat / 2) ** 2 + math.cos(lat1) * np.cos(lat2) * np.sin(dlong / 2) ** 2
    h = np.clip(h, 0.0, 1.0)
    result = EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))

    unknown = (table[:, 0] == 0) & (table[:, 1] == 0)
    result[unknown] = MAX_DISTANCE
    return result


def nearest(
    reference: Location, candidates: Sequence[Location]
) -> Tuple[int, Location]:
    """
    Finds the candidate closest to `reference` with a linear scan.

    Unknown candidates are skipped and the first candidate reaching the
    minimum distance wins.

    Returns:
        A tuple (index, location), or `NOT_FOUND` when there are no
        candidates, all of them are unknown, or the reference is unknown.
    """
    if len(candidates) == 0:
        return NOT_FOUND

    nearest_index = -1
    nearest_location = UNKNOWN_LOCATION
    min_distance = MAX_DISTANCE

    for i, candidate in enumerate(candidates):
        if candidate.is_unknown():
            continue
        dist = distance(reference, candidate)
        if dist < min_distance:
            min_distance = dist
            nearest_index = i
            nearest_location = candidate

    if nearest_index < 0:
        return NOT_FOUND
    return nearest_index, nearest_location


def average_location(locations: Iterable[Location]) -> Location:
    """
    Arithmetic mean of the known locations in `locations`.

    Used to summarise where a group of co-located servers is.
    Returns the unknown location if no known location is given.
    """
    sum_lat = sum_long = 0.0
    num = 0
    for loc in locations:
        if loc.is_unknown():
            continue
        num += 1
        sum_lat += loc.lat
        sum_long += loc.long

    if num == 0:
        return UNKNOWN_LOCATION
    return Location(lat=sum_lat / num, long=sum_long / num)
