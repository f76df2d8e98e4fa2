#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Generates the RTT and location tables used to pick the PoP serving a client.

Two RTT tables are built from the WonderProxy pings, one whose columns are
the PoP servers and one whose columns are the probe servers, together with
the location of every server. The three tables are written as ``.npy``
files and printed for inspection.

Usage example:
    To download the dataset to ./data and write the tables there:

    $ python -m gslb_geo.datasets --data_dir ./data --fetch

    The server names can be changed with gin bindings:

    $ python -m gslb_geo.datasets \
        --gin_binding "generate_tables.pop_names = ['Tokyo', 'London']"

The run is all-or-nothing: the first error reading the dataset or writing
a table aborts it.
"""

from __future__ import annotations

from dataclasses import dataclass
from os import makedirs
from typing import AnyStr, Sequence

import click
import gin
import numpy as np
from absl import logging

from gslb_geo.config import (
    DEFAULT_DATA_DIR,
    POP_SERVER_NAMES,
    PROBE_SERVER_NAMES,
    TablePaths,
)
from gslb_geo.datasets.rtt import RttTable, build_rtt_table, server_location_array
from gslb_geo.datasets.wonderproxy import (
    Datasets,
    fetch_data,
    local_data,
    read_pings,
    read_servers,
)
from gslb_geo.errors import BatchAbort, GslbGeoError
from gslb_geo.tables import (
    load_locations,
    load_rtt_array,
    save_locations,
    save_rtt_array,
)


@dataclass(frozen=True)
class GeneratedTables:
    """Everything a table-generation run produced."""

    pop: RttTable
    probe: RttTable
    locations: np.ndarray
    paths: TablePaths


@gin.configurable
def generate_tables(
    datasets: Datasets,
    output_dir: AnyStr,
    pop_names: Sequence[str] = POP_SERVER_NAMES,
    probe_names: Sequence[str] = PROBE_SERVER_NAMES,
) -> GeneratedTables:
    """
    Builds and saves the PoP RTT table, the probe RTT table and the
    server locations.

    Args:
        datasets: paths of the server and ping CSV files
        output_dir: directory where the tables are written
        pop_names: names of the PoP servers, one column each
        probe_names: names of the probe servers, one column each

    Returns:
        The generated tables and the paths they were saved to.

    Raises:
        BatchAbort: on the first error reading the dataset or saving a table
    """
    paths = TablePaths.in_dir(output_dir)
    try:
        servers = read_servers(datasets.servers)
        pings = read_pings(datasets.pings)

        pop_table = build_rtt_table(servers, pings, pop_names)
        probe_table = build_rtt_table(servers, pings, probe_names)
        locations = server_location_array(servers)

        makedirs(output_dir, exist_ok=True)
        save_rtt_array(pop_table.rtt_array, paths.pop_rtt)
        save_rtt_array(probe_table.rtt_array, paths.probe_rtt)
        save_locations(locations, paths.locations)
    except (GslbGeoError, OSError) as e:
        raise BatchAbort(f"table generation aborted: {e}") from e

    return GeneratedTables(
        pop=pop_table, probe=probe_table, locations=locations, paths=paths
    )


def print_rtt_array(file_path: AnyStr, server_ids: Sequence[int]) -> None:
    """Prints a saved RTT table, one line per source server."""
    rtt_array = load_rtt_array(file_path)
    click.echo(f"RTT Map from {file_path}:")
    for i, row in enumerate(rtt_array):
        cells = " ".join(
            f"Dst {server_ids[j]}: {rtt:f}" for j, rtt in enumerate(row)
        )
        click.echo(f"Source {i}: {cells}")


def print_locations(file_path: AnyStr) -> None:
    """Prints a saved location table, one line per server."""
    locations = load_locations(file_path)
    click.echo(f"Server Locations from {file_path}:")
    for i, (lat, long) in enumerate(locations):
        click.echo(f"Server {i}: Latitude: {lat:f}, Longitude: {long:f}")


def print_tables(tables: GeneratedTables) -> None:
    """Reloads and prints the three tables of a run."""
    print_rtt_array(tables.paths.pop_rtt, tables.pop.server_ids)
    print_rtt_array(tables.paths.probe_rtt, tables.probe.server_ids)
    print_locations(tables.paths.locations)


def parse_gin_config(gin_files: Sequence[str], gin_bindings: Sequence[str]) -> None:
    """
    Applies gin configuration files and bindings.

    Raises:
        BatchAbort: if a file cannot be read or a binding is invalid
    """
    try:
        gin.parse_config_files_and_bindings(gin_files, gin_bindings)
    except (OSError, SyntaxError, ValueError) as e:
        raise BatchAbort(f"invalid gin configuration: {e}") from e


@click.command()
@click.option(
    "--data_dir",
    help="Directory holding the WonderProxy CSV files",
    default=DEFAULT_DATA_DIR,
)
@click.option(
    "--output_dir",
    help="Directory where to store the tables [default: data_dir]",
    default=None,
)
@click.option(
    "--fetch/--no-fetch",
    default=False,
    help="Download the dataset into data_dir if it is missing",
)
@click.option("--gin_file", multiple=True, help="Gin configuration files")
@click.option("--gin_binding", multiple=True, help="Gin parameter bindings")
@click.option("--quiet", is_flag=True, help="Do not print the generated tables")
@click.option("--verbose", is_flag=True, help="Log debug messages")
def main(**options):
    """Entry point for generating the tables."""
    logging.set_verbosity(logging.DEBUG if options["verbose"] else logging.INFO)

    data_dir = options["data_dir"]
    output_dir = options["output_dir"] or data_dir
    try:
        parse_gin_config(options["gin_file"], options["gin_binding"])
        if options["fetch"]:
            datasets = fetch_data(cache_path=data_dir)
        else:
            datasets = local_data(data_dir)
        tables = generate_tables(datasets, output_dir)
        if not options["quiet"]:
            print_tables(tables)
    except GslbGeoError as e:
        logging.error("%s", e)
        raise click.ClickException(str(e)) from e
