#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Module for downloading and reading the WonderProxy dataset, whose server
list and pairwise pings are the raw input of the RTT tables.

More details on the dataset can be found
`here <https://wonderproxy.com/blog/a-day-in-the-life-of-the-internet/>`_.

Any error reading the files is reported as a `DatasetError`; table
generation treats it as fatal.
"""

from collections import namedtuple
from os import path, makedirs
from typing import AnyStr, Dict, Sequence

import pandas as pd
import requests
from absl import logging

from gslb_geo.datasets.util import download_file, decompress_gz
from gslb_geo.errors import DatasetError

PINGS_URL = (
    "https://wp-public.s3.amazonaws.com/pings/pings-2020-07-19-2020-07-20.csv.gz"
)
SERVERS_URL = "https://wp-public.s3.amazonaws.com/pings/servers-2020-07-19.csv"
SERVERS_FILE = "servers-2020-07-19.csv"
PINGS_FILE = "pings-2020-07-19-2020-07-20.csv"

SERVER_DTYPES: Dict[str, str] = {
    "id": "int64",
    "name": "object",
    "latitude": "float64",
    "longitude": "float64",
}
PING_DTYPES: Dict[str, str] = {
    "source": "int64",
    "destination": "int64",
    "avg": "float64",
}

SERVER_ID_COLUMNS = ("id",)
PING_ID_COLUMNS = ("source", "destination")

Datasets = namedtuple("Datasets", ["servers", "pings"])


def fetch_data(cache_path: AnyStr) -> Datasets:
    """Download the WonderProxy dataset and decompress any gz file."""

    def download_if_not_exists(fetch_url) -> AnyStr:
        save_file = path.join(cache_path, path.basename(fetch_url))
        csv_file, ext = path.splitext(save_file)
        if ext.lower() != ".gz":
            csv_file = save_file

        if path.exists(csv_file):
            return csv_file

        try:
            download_file(fetch_url, save_file)
        except requests.exceptions.RequestException as e:
            raise DatasetError(f"failed to download {fetch_url}: {e}") from e

        if ext.lower() == ".gz":
            try:
                csv_file = decompress_gz(save_file, cache_path)
            except (OSError, EOFError) as e:
                raise DatasetError(f"failed to decompress {save_file}: {e}") from e

        logging.info("File downloaded and saved as %s", csv_file)
        return csv_file

    try:
        makedirs(cache_path, exist_ok=True)
    except OSError as e:
        raise DatasetError(f"failed to create {cache_path}: {e}") from e
    return Datasets(
        servers=download_if_not_exists(SERVERS_URL),
        pings=download_if_not_exists(PINGS_URL),
    )


def local_data(data_dir: AnyStr) -> Datasets:
    """Returns the paths of a dataset already present in `data_dir`."""
    return Datasets(
        servers=path.join(data_dir, SERVERS_FILE),
        pings=path.join(data_dir, PINGS_FILE),
    )


def _read_csv(
    file_path: AnyStr,
    dtypes: Dict[str, str],
    id_columns: Sequence[str],
    **kwargs,
) -> pd.DataFrame:
    try:
        df = pd.read_csv(file_path, **kwargs)
    except (OSError, ValueError) as e:
        raise DatasetError(f"failed to decode CSV {file_path}: {e}") from e

    missing = [column for column in dtypes if column not in df.columns]
    if missing:
        raise DatasetError(f"{file_path} lacks the columns {missing}")

    try:
        df = df.astype(dtypes)
    except (TypeError, ValueError) as e:
        raise DatasetError(f"invalid values in {file_path}: {e}") from e

    # ids index the rows of the tables
    for column in id_columns:
        if (df[column] < 0).any():
            raise DatasetError(f"negative {column} in {file_path}")
    return df


def read_servers(file_path: AnyStr) -> pd.DataFrame:
    """
    Reads the WonderProxy server list.

    Returns:
        A DataFrame with at least the columns id, name, latitude and longitude.

    Raises:
        DatasetError: if the file cannot be read, lacks a column or has a negative id
    """
    df = _read_csv(file_path, SERVER_DTYPES, SERVER_ID_COLUMNS)
    logging.info("Read %d servers from %s", len(df), file_path)
    return df


def read_pings(file_path: AnyStr) -> pd.DataFrame:
    """
    Reads the source, destination and average RTT of each WonderProxy ping.

    Raises:
        DatasetError: if the file cannot be read, lacks a column or has a negative id
    """
    df = _read_csv(
        file_path, PING_DTYPES, PING_ID_COLUMNS, usecols=lambda c: c in PING_DTYPES
    )
    logging.info("Read %d pings from %s", len(df), file_path)
    return df
