#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Default settings used when generating the RTT and location tables.

The server names are the titles used by the WonderProxy dataset. PoP
servers are the sites that serve clients; probe servers are the vantage
points whose latency to each PoP is recorded.

More details on the WonderProxy dataset can be found
`here <https://wonderproxy.com/blog/a-day-in-the-life-of-the-internet/>`_.
"""

from __future__ import annotations

from dataclasses import dataclass
from os import path
from typing import AnyStr, Tuple

POP_SERVER_NAMES: Tuple[str, ...] = (
    "Singapore",
    "NewYork",
    "SanFrancisco",
    "Toronto",
    "Frankfurt",
)

PROBE_SERVER_NAMES: Tuple[str, ...] = (
    "Singapore",
    "SanFrancisco",
    "Bangalore",
    "Sydney",
    "Amsterdam",
)

DEFAULT_DATA_DIR = "./data"
GEOIP_DB_FILE = "GeoLite2-City.mmdb"


@dataclass(frozen=True)
class TablePaths:
    """Locations of the artifacts written by a table-generation run."""

    pop_rtt: AnyStr
    probe_rtt: AnyStr
    locations: AnyStr

    @classmethod
    def in_dir(cls, output_dir: AnyStr) -> TablePaths:
        """Returns the default artifact paths inside `output_dir`."""
        return cls(
            pop_rtt=path.join(output_dir, "pop_rtt_map.npy"),
            probe_rtt=path.join(output_dir, "probe_rtt_map.npy"),
            locations=path.join(output_dir, "server_locations.npy"),
        )
