#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Builds dense RTT tables from WonderProxy pings.

The pipeline has four stages:

1. **Filter servers** -- keep the servers whose name was requested, in
   the requested order.
2. **Filter pings** -- keep the pings sent to one of those servers.
3. **Group and average** -- mean of the ``avg`` RTT of every
   (source, destination) pair.
4. **Densify** -- a 2-D array whose row `i` holds the RTTs measured from
   server id `i` and whose columns follow the requested destinations.

A cell equal to 0 means that no ping was observed for the pair; a
measured RTT of exactly 0 cannot be told apart from a missing one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np
import pandas as pd
from absl import logging

RttMap = Dict[int, Dict[int, float]]

__all__ = [
    "RttMap",
    "RttTable",
    "filter_servers",
    "filter_pings",
    "average_rtt_map",
    "rtt_map_to_array",
    "server_location_array",
    "build_rtt_table",
]


@dataclass(frozen=True)
class RttTable:
    """Result of running the pipeline for a list of server names."""

    names: Tuple[str, ...]
    server_ids: Tuple[int, ...]
    rtt_map: RttMap
    rtt_array: np.ndarray


def filter_servers(servers: pd.DataFrame, names: Sequence[str]) -> pd.DataFrame:
    """
    Selects the servers named in `names`, preserving the order of `names`.

    A name with no matching server leaves a row of zeros (and empty
    strings) at its position instead of raising an error. When several
    servers share a name, the last one is kept. If `names` is empty all
    servers are returned.
    """
    if len(names) == 0:
        return servers.reset_index(drop=True)

    by_name = servers.drop_duplicates("name", keep="last").set_index(
        "name", drop=False
    )
    filtered = by_name.reindex(list(names))

    missing = [name for name, absent in zip(names, filtered["id"].isna()) if absent]
    if missing:
        logging.warning("No server found for names %s", missing)

    fill_values = {
        column: 0 if pd.api.types.is_numeric_dtype(servers[column]) else ""
        for column in servers.columns
    }
    filtered = filtered.fillna(fill_values).astype(servers.dtypes.to_dict())
    return filtered.reset_index(drop=True)


def filter_pings(pings: pd.DataFrame, server_ids: Sequence[int]) -> pd.DataFrame:
    """Keeps the pings whose destination is one of `server_ids`."""
    return pings[pings["destination"].isin(list(server_ids))].reset_index(drop=True)


def average_rtt_map(pings: pd.DataFrame) -> RttMap:
    """
    Groups pings by source and destination and averages their RTT.

    Returns:
        A mapping source id -> destination id -> mean of the ``avg`` column.
    """
    result: RttMap = {}
    if pings.empty:
        return result

    means = pings.groupby(["source", "destination"])["avg"].mean()
    for (source, destination), rtt in means.items():
        result.setdefault(int(source), {})[int(destination)] = float(rtt)
    return result


def rtt_map_to_array(rtt_map: RttMap, destination_ids: Sequence[int]) -> np.ndarray:
    """
    Converts a nested RTT mapping into a dense array.

    Args:
        rtt_map: mapping source id -> destination id -> RTT
        destination_ids: the destination of each column, in order

    Returns:
        Array of shape (max source id + 1, len(destination_ids)). Rows of
        sources with no pings and cells of unobserved pairs are 0.

    Raises:
        ValueError: if a source id is negative
    """
    if any(source < 0 for source in rtt_map):
        raise ValueError("source ids must not be negative")

    max_source_id = max(rtt_map, default=0)
    result = np.zeros((max_source_id + 1, len(destination_ids)), dtype=np.float64)

    for source, destinations in rtt_map.items():
        for i, destination in enumerate(destination_ids):
            result[source, i] = destinations.get(destination, 0.0)
    return result


def server_location_array(servers: pd.DataFrame) -> np.ndarray:
    """
    Builds a location table indexed by server id.

    Returns:
        Array of shape (max server id + 1, 2) with the latitude and
        longitude of each server. Ids without a server are (0, 0), the
        unknown location.
    """
    ids = servers["id"].to_numpy(dtype=np.int64)
    if (ids < 0).any():
        raise ValueError("server ids must not be negative")
    max_id = int(ids.max()) if len(ids) else 0

    locations = np.zeros((max_id + 1, 2), dtype=np.float64)
    locations[ids] = servers[["latitude", "longitude"]].to_numpy(dtype=np.float64)
    return locations


def build_rtt_table(
    servers: pd.DataFrame, pings: pd.DataFrame, names: Sequence[str]
) -> RttTable:
    """
    Runs the whole pipeline for the servers named in `names`.

    Args:
        servers: the server list, see `wonderproxy.read_servers`
        pings: the ping records, see `wonderproxy.read_pings`
        names: the destination servers, one column each

    Returns:
        The ids of the selected servers, the averaged RTTs and the dense table.
    """
    selected = filter_servers(servers, names)
    server_ids = tuple(int(i) for i in selected["id"])

    selected_pings = filter_pings(pings, server_ids)
    logging.info(
        "Kept %d of %d pings towards %d servers",
        len(selected_pings),
        len(pings),
        len(server_ids),
    )

    rtt_map = average_rtt_map(selected_pings)
    rtt_array = rtt_map_to_array(rtt_map, server_ids)
    return RttTable(
        names=tuple(names),
        server_ids=server_ids,
        rtt_map=rtt_map,
        rtt_array=rtt_array,
    )
