#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Serving-time selection of the PoP that should answer a client.

A `SiteSelector` combines the persisted tables: the location of every
server and the RTT from probe servers to each PoP. When the client can be
mapped to a probe server with measurements, the PoP with the lowest RTT is
chosen; otherwise the geographically nearest PoP is.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np
from absl import logging

from .location import MAX_DISTANCE, UNKNOWN_LOCATION, Location, nearest
from .tables import array_to_locations


class SiteSelector:
    """
    Chooses a PoP from read-only location and RTT tables.

    Attributes:
        pop_ids: server id of each PoP, in the column order of `rtt_array`
        pop_locations: location of each PoP, in the same order
        rtt_array: RTT from each source server id (row) to each PoP (column)
    """

    pop_ids: Tuple[int, ...]
    pop_locations: List[Location]
    rtt_array: np.ndarray

    def __init__(
        self,
        locations: np.ndarray,
        pop_ids: Sequence[int],
        rtt_array: Optional[np.ndarray] = None,
    ):
        all_locations = array_to_locations(locations)
        self.pop_ids = tuple(int(i) for i in pop_ids)
        self.pop_locations = [
            all_locations[i] if 0 <= i < len(all_locations) else UNKNOWN_LOCATION
            for i in self.pop_ids
        ]
        if rtt_array is None:
            rtt_array = np.zeros((0, len(self.pop_ids)))
        if rtt_array.ndim != 2 or rtt_array.shape[1] != len(self.pop_ids):
            raise ValueError(
                f"RTT table of shape {rtt_array.shape} does not match "
                f"{len(self.pop_ids)} PoPs"
            )
        self.rtt_array = rtt_array

    def nearest_pop(self, client: Location) -> Tuple[int, Location]:
        """Index and location of the PoP closest to `client`."""
        return nearest(client, self.pop_locations)

    def lowest_rtt_pop(self, source_id: int) -> Tuple[int, float]:
        """
        Index of the PoP with the lowest measured RTT from `source_id`.

        Cells equal to 0 hold no measurement and are ignored.

        Returns:
            A tuple (index, rtt), or (-1, MAX_DISTANCE) when the source has
            no measurement.
        """
        if not 0 <= source_id < len(self.rtt_array):
            return -1, MAX_DISTANCE

        row = self.rtt_array[source_id]
        measured = np.flatnonzero(row > 0)
        if len(measured) == 0:
            return -1, MAX_DISTANCE

        # argmin returns the first minimum, so column order breaks ties
        best = int(measured[np.argmin(row[measured])])
        return best, float(row[best])

    def select(self, client: Location, source_id: Optional[int] = None) -> int:
        """
        Index of the PoP that should serve `client`, -1 if none can be chosen.

        Args:
            client: location of the client
            source_id: id of the probe server standing for the client, if any
        """
        if source_id is not None:
            index, rtt = self.lowest_rtt_pop(source_id)
            if index >= 0:
                logging.debug("Selected PoP %d by RTT %.3f ms", index, rtt)
                return index

        index, _ = self.nearest_pop(client)
        logging.debug("Selected PoP %d by distance", index)
        return index
