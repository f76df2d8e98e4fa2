#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Exceptions raised by the table builder and the serving-time loaders."""


class GslbGeoError(Exception):
    """Base class for the errors of this package."""


class DatasetError(GslbGeoError):
    """Raised when raw server or ping records cannot be read or decoded."""


class TableLoadError(GslbGeoError):
    """Raised when a persisted table is missing, corrupt or has the wrong shape."""


class TableSaveError(GslbGeoError):
    """Raised when a table cannot be written to disk."""


class GeoServiceError(GslbGeoError):
    """Raised when the geolocation database is unavailable."""


class BatchAbort(GslbGeoError):
    """
    Fatal error of a table-generation run.

    The cause is chained with ``raise ... from`` so the entry point can
    report it before exiting.
    """
