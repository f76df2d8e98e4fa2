#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
IP-to-location lookups backed by a MaxMind GeoIP2 City database.

A failed lookup is not an error for the callers of this module: addresses
that cannot be resolved map to the unknown location, which nearest-site
searches never pick.
"""

from __future__ import annotations

import ipaddress
from os import path
from typing import AnyStr, List, Optional, Sequence, Union

import geoip2.database
import geoip2.errors
import geoip2.models
import maxminddb
from absl import logging

from .config import DEFAULT_DATA_DIR, GEOIP_DB_FILE
from .errors import GeoServiceError
from .location import UNKNOWN_LOCATION, Location, location_from_coordinates

IPAddress = Union[str, ipaddress.IPv4Address, ipaddress.IPv6Address]


def location_from_city(record: Optional[geoip2.models.City]) -> Location:
    """Extracts the location of a GeoIP2 city record."""
    if record is None:
        return UNKNOWN_LOCATION
    return location_from_coordinates(
        record.location.latitude, record.location.longitude
    )


class GeoService:
    """Resolves IP addresses and prefixes to geographical locations."""

    db_path: AnyStr
    _reader: Optional[geoip2.database.Reader]

    def __init__(self, db_path: AnyStr = path.join(DEFAULT_DATA_DIR, GEOIP_DB_FILE)):
        self.db_path = db_path
        self._reader = None

    def init(self) -> None:
        """
        Opens the GeoIP2 database.

        Raises:
            GeoServiceError: if the database cannot be opened or decoded
        """
        try:
            self._reader = geoip2.database.Reader(self.db_path)
        except (OSError, ValueError, maxminddb.InvalidDatabaseError) as e:
            raise GeoServiceError(
                f"failed to open GeoIP2 database {self.db_path}: {e}"
            ) from e
        logging.info("Opened GeoIP2 database %s", self.db_path)

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def __enter__(self) -> GeoService:
        if self._reader is None:
            self.init()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def city(self, address: IPAddress) -> geoip2.models.City:
        """
        Returns the GeoIP2 city record of `address`.

        Raises:
            GeoServiceError: if the service has not been initialised
            geoip2.errors.AddressNotFoundError: if the address is not in the database
        """
        if self._reader is None:
            raise GeoServiceError("GeoService not initialized")
        return self._reader.city(address)

    def location(self, address: IPAddress) -> Location:
        """Location of `address`, or the unknown location if it cannot be resolved."""
        try:
            return location_from_city(self.city(address))
        except geoip2.errors.AddressNotFoundError:
            logging.debug("Address %s not in the database", address)
            return UNKNOWN_LOCATION
        except (
            geoip2.errors.GeoIP2Error,
            maxminddb.InvalidDatabaseError,
            ValueError,
        ) as e:
            logging.warning("No location for %s: %s", address, e)
            return UNKNOWN_LOCATION

    def locations(self, prefixes: Sequence[str]) -> List[Location]:
        """
        Resolves the address of each network prefix (e.g. ``"192.0.2.1/24"``).

        The result has one location per prefix, in the same order.
        Unparsable prefixes and failed lookups give the unknown location.
        """
        if self._reader is None:
            raise GeoServiceError("GeoService not initialized")

        locations = []
        for prefix in prefixes:
            try:
                address = ipaddress.ip_interface(prefix).ip
            except ValueError:
                logging.warning("Invalid network prefix %r", prefix)
                locations.append(UNKNOWN_LOCATION)
                continue
            locations.append(self.location(address))
        return locations
