#!/usr/bin/env python
# -*- coding: utf-8 -*-
""" Tests the table-generation run and its command line """

import os
import tempfile
import unittest

import gin
import numpy as np
from click.testing import CliRunner

from gslb_geo.config import TablePaths
from gslb_geo.datasets import generate
from gslb_geo.datasets.wonderproxy import PINGS_FILE, SERVERS_FILE, local_data
from gslb_geo.errors import BatchAbort
from gslb_geo.tables import load_locations, load_rtt_array

SERVERS_CSV = """id,name,title,location,state,country,state_abbv,continent,latitude,longitude
1,Singapore,Singapore,Singapore,,Singapore,,5,1.3521,103.8198
2,NewYork,New York,"New York, United States",New York,United States,NY,7,40.7128,-74.0060
3,Sydney,Sydney,"Sydney, Australia",New South Wales,Australia,NSW,6,-33.8688,151.2093
5,Amsterdam,Amsterdam,"Amsterdam, Netherlands",,Netherlands,,4,52.3676,4.9041
"""

PINGS_CSV = """source,destination,timestamp,min,avg,max,mdev
1,2,2020-07-19 21:04:00,230.0,240.0,250.0,1.0
1,2,2020-07-19 22:04:00,250.0,260.0,270.0,1.0
3,1,2020-07-19 21:04:00,90.0,95.5,100.0,1.0
5,3,2020-07-19 21:04:00,280.0,290.0,300.0,1.0
2,5,2020-07-19 21:04:00,80.0,85.0,90.0,1.0
"""

POP_NAMES = ["Singapore", "NewYork"]
PROBE_NAMES = ["Sydney", "Amsterdam"]


class GenerateTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.data_dir = self.tmp_dir.name
        self.output_dir = os.path.join(self.data_dir, "tables")
        self.write(SERVERS_FILE, SERVERS_CSV)
        self.write(PINGS_FILE, PINGS_CSV)

    def tearDown(self) -> None:
        gin.clear_config()
        self.tmp_dir.cleanup()

    def write(self, file_name, content):
        with open(os.path.join(self.data_dir, file_name), "w") as file:
            file.write(content)


class TestGenerateTables(GenerateTestCase):
    """Tests building and saving the three tables."""

    def test_generate(self):
        tables = generate.generate_tables(
            local_data(self.data_dir),
            self.output_dir,
            pop_names=POP_NAMES,
            probe_names=PROBE_NAMES,
        )
        self.assertEqual(tables.paths, TablePaths.in_dir(self.output_dir))
        self.assertEqual(tables.pop.server_ids, (1, 2))
        self.assertEqual(tables.probe.server_ids, (3, 5))

        pop_rtt = load_rtt_array(tables.paths.pop_rtt)
        np.testing.assert_array_equal(
            pop_rtt, [[0.0, 0.0], [0.0, 250.0], [0.0, 0.0], [95.5, 0.0]]
        )

        probe_rtt = load_rtt_array(tables.paths.probe_rtt)
        self.assertEqual(probe_rtt.shape, (6, 2))
        self.assertEqual(probe_rtt[5].tolist(), [290.0, 0.0])
        self.assertEqual(probe_rtt[2].tolist(), [0.0, 85.0])

        locations = load_locations(tables.paths.locations)
        self.assertEqual(locations.shape, (6, 2))
        self.assertEqual(locations[3].tolist(), [-33.8688, 151.2093])
        self.assertEqual(locations[4].tolist(), [0.0, 0.0])
        np.testing.assert_array_equal(locations, tables.locations)

    def test_default_names_leave_holes(self):
        tables = generate.generate_tables(local_data(self.data_dir), self.output_dir)
        # Only Singapore and NewYork of the default PoPs exist in this dataset
        self.assertEqual(tables.pop.server_ids, (1, 2, 0, 0, 0))
        self.assertEqual(tables.pop.rtt_array.shape, (4, 5))

    def test_gin_binding(self):
        gin.parse_config("generate_tables.pop_names = ['Sydney']")
        tables = generate.generate_tables(local_data(self.data_dir), self.output_dir)
        self.assertEqual(tables.pop.server_ids, (3,))

    def test_missing_pings_aborts(self):
        os.remove(os.path.join(self.data_dir, PINGS_FILE))
        with self.assertRaises(BatchAbort):
            generate.generate_tables(local_data(self.data_dir), self.output_dir)
        self.assertFalse(os.path.exists(self.output_dir))

    def test_corrupt_servers_aborts(self):
        self.write(SERVERS_FILE, "id,name\n1,Singapore\n")
        with self.assertRaises(BatchAbort) as ctx:
            generate.generate_tables(local_data(self.data_dir), self.output_dir)
        self.assertIsNotNone(ctx.exception.__cause__)


class TestCommandLine(GenerateTestCase):
    """Tests the click entry point."""

    def test_main(self):
        result = CliRunner().invoke(
            generate.main,
            ["--data_dir", self.data_dir, "--output_dir", self.output_dir],
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("RTT Map from", result.output)
        self.assertIn("Source 1: Dst 1: 0.000000 Dst 2: 250.000000", result.output)
        self.assertIn("Server 3: Latitude: -33.868800, Longitude: 151.209300", result.output)
        self.assertTrue(os.path.exists(TablePaths.in_dir(self.output_dir).locations))

    def test_quiet_writes_to_data_dir(self):
        result = CliRunner().invoke(generate.main, ["--data_dir", self.data_dir, "--quiet"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertNotIn("RTT Map from", result.output)
        self.assertTrue(os.path.exists(TablePaths.in_dir(self.data_dir).pop_rtt))

    def test_gin_binding_option(self):
        result = CliRunner().invoke(
            generate.main,
            [
                "--data_dir",
                self.data_dir,
                "--quiet",
                "--gin_binding",
                "generate_tables.pop_names = ['Amsterdam']",
            ],
        )
        self.assertEqual(result.exit_code, 0, result.output)
        pop_rtt = load_rtt_array(TablePaths.in_dir(self.data_dir).pop_rtt)
        self.assertEqual(pop_rtt.shape, (3, 1))
        self.assertEqual(pop_rtt[2].tolist(), [85.0])

    def test_missing_dataset_fails(self):
        os.remove(os.path.join(self.data_dir, SERVERS_FILE))
        result = CliRunner().invoke(generate.main, ["--data_dir", self.data_dir])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("table generation aborted", result.output)


    def test_invalid_gin_binding_fails(self):
        result = CliRunner().invoke(
            generate.main,
            ["--data_dir", self.data_dir, "--gin_binding", "no_such_function.names = [1]"],
        )
        self.assertEqual(result.exit_code, 1)
        self.assertIn("invalid gin configuration", result.output)

    def test_missing_gin_file_fails(self):
        missing = os.path.join(self.data_dir, "missing.gin")
        result = CliRunner().invoke(
            generate.main, ["--data_dir", self.data_dir, "--gin_file", missing]
        )
        self.assertEqual(result.exit_code, 1)
        self.assertIn("invalid gin configuration", result.output)

    def test_fetch_into_unusable_directory_fails(self):
        blocker = os.path.join(self.data_dir, "blocker")
        with open(blocker, "w") as file:
            file.write("")
        result = CliRunner().invoke(
            generate.main, ["--data_dir", os.path.join(blocker, "data"), "--fetch"]
        )
        self.assertEqual(result.exit_code, 1)
        self.assertIn("failed to create", result.output)

if __name__ == "__main__":
    unittest.main()
