#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Persistence of the RTT and location tables.

Both tables are stored as NumPy ``.npy`` files without pickled objects:

* an RTT table is a 2-D float64 array whose rows are source server ids
  and whose columns follow a list of destination server ids;
* a location table is a float64 array of shape (N, 2) whose row `i`
  holds the latitude and longitude of server `i`.

Loaded arrays are read-only, so a table can be shared by any number of
concurrent lookups once loaded.
"""

from __future__ import annotations

from typing import AnyStr, List, Sequence

import numpy as np
from absl import logging

from .errors import TableLoadError, TableSaveError
from .location import Location

__all__ = [
    "save_rtt_array",
    "load_rtt_array",
    "save_locations",
    "load_locations",
    "locations_to_array",
    "array_to_locations",
]


def _save_array(array: np.ndarray, file_path: AnyStr) -> None:
    try:
        with open(file_path, "wb") as file:
            np.save(file, array, allow_pickle=False)
    except OSError as e:
        raise TableSaveError(f"failed to write {file_path}: {e}") from e


def _load_array(file_path: AnyStr) -> np.ndarray:
    try:
        array = np.load(file_path, allow_pickle=False)
    except FileNotFoundError as e:
        raise TableLoadError(f"failed to open file: {file_path}") from e
    except (OSError, ValueError, EOFError) as e:
        raise TableLoadError(f"failed to decode {file_path}: {e}") from e

    if not isinstance(array, np.ndarray):
        # np.load returns an NpzFile for .npz archives
        array.close()
        raise TableLoadError(f"{file_path} is not a single-array file")
    if array.dtype != np.float64:
        raise TableLoadError(
            f"{file_path} holds {array.dtype} values, expected float64"
        )
    array.flags.writeable = False
    return array


def save_rtt_array(rtt_array: np.ndarray, file_path: AnyStr) -> None:
    """
    Writes an RTT table to disk.

    Args:
        rtt_array: 2-D array of average RTTs, 0 where no sample exists
        file_path: the file to create or overwrite

    Raises:
        TableSaveError: if the array is not 2-D or cannot be written
    """
    rtt_array = np.asarray(rtt_array, dtype=np.float64)
    if rtt_array.ndim != 2:
        raise TableSaveError(f"RTT table must be 2-D, got shape {rtt_array.shape}")
    _save_array(rtt_array, file_path)
    logging.info("Saved RTT table of shape %s to %s", rtt_array.shape, file_path)


def load_rtt_array(file_path: AnyStr) -> np.ndarray:
    """
    Reads an RTT table written by `save_rtt_array`.

    Raises:
        TableLoadError: on a missing, corrupt or non-matrix file
    """
    rtt_array = _load_array(file_path)
    if rtt_array.ndim != 2:
        raise TableLoadError(
            f"{file_path} holds an array of shape {rtt_array.shape}, expected 2-D"
        )
    logging.debug("Loaded RTT table of shape %s from %s", rtt_array.shape, file_path)
    return rtt_array


def save_locations(locations: np.ndarray, file_path: AnyStr) -> None:
    """Writes a location table of shape (N, 2) to disk."""
    locations = np.asarray(locations, dtype=np.float64)
    if locations.ndim != 2 or locations.shape[1] != 2:
        raise TableSaveError(
            f"location table must have shape (N, 2), got {locations.shape}"
        )
    _save_array(locations, file_path)
    logging.info("Saved %d server locations to %s", len(locations), file_path)


def load_locations(file_path: AnyStr) -> np.ndarray:
    """
    Reads a location table written by `save_locations`.

    Raises:
        TableLoadError: on a missing, corrupt or wrongly shaped file
    """
    locations = _load_array(file_path)
    if locations.ndim != 2 or locations.shape[1] != 2:
        raise TableLoadError(
            f"{file_path} holds an array of shape {locations.shape}, expected (N, 2)"
        )
    logging.debug("Loaded %d server locations from %s", len(locations), file_path)
    return locations


def locations_to_array(locations: Sequence[Location]) -> np.ndarray:
    """Converts a list of locations into a location table."""
    array = np.zeros((len(locations), 2), dtype=np.float64)
    for i, loc in enumerate(locations):
        array[i] = (loc.lat, loc.long)
    return array


def array_to_locations(table: np.ndarray) -> List[Location]:
    """Converts a location table into a list of locations."""
    return [Location(lat=float(lat), long=float(long)) for lat, long in table]
