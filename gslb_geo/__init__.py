#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Geographical and latency-based selection of points of presence (PoPs)
for global server load balancing, and the tables it relies on.
"""

from .location import (
    EARTH_RADIUS_KM,
    MAX_DISTANCE,
    NOT_FOUND,
    UNKNOWN_LOCATION,
    Location,
    average_location,
    distance,
    distances,
    is_unknown,
    location_from_coordinates,
    nearest,
)
from .selector import SiteSelector
from .tables import (
    array_to_locations,
    load_locations,
    load_rtt_array,
    locations_to_array,
    save_locations,
    save_rtt_array,
)

__all__ = [
    "EARTH_RADIUS_KM",
    "MAX_DISTANCE",
    "NOT_FOUND",
    "UNKNOWN_LOCATION",
    "Location",
    "SiteSelector",
    "average_location",
    "distance",
    "distances",
    "is_unknown",
    "location_from_coordinates",
    "nearest",
    "array_to_locations",
    "load_locations",
    "load_rtt_array",
    "locations_to_array",
    "save_locations",
    "save_rtt_array",
]
