# -*- coding: utf-8 -*-
# Copyright 2024, CS GROUP - France, https://www.csgroup.eu/
#
# This file is part of CDSDL project
#     https://www.github.com/CS-SI/cdsdl
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
import os
import unittest
from tempfile import TemporaryDirectory

from tests import TEST_RESOURCES_PATH
from tests.context import (
    DEFAULT_S3_ENDPOINT,
    DEFAULT_SEARCH_ENDPOINT,
    NOT_SET,
    GlobPattern,
    InvalidGlobPattern,
    KeysConfig,
    MisconfiguredError,
    SearchConfig,
    StorageConfig,
    build_storage_config,
    load_keys_config,
    load_search_config,
    load_yml_config,
)

CONF_PATH = os.path.join(TEST_RESOURCES_PATH, "conf")


class TestSearchConfig(unittest.TestCase):
    def setUp(self):
        super(TestSearchConfig, self).setUp()
        self.tmp_dir = TemporaryDirectory()

    def tearDown(self):
        super(TestSearchConfig, self).tearDown()
        self.tmp_dir.cleanup()

    def write_conf(self, content):
        """Utility method"""
        conf_path = os.path.join(self.tmp_dir.name, "conf.yml")
        with open(conf_path, "w") as fh:
            fh.write(content)
        return conf_path

    def test_search_config_defaults(self):
        """Without configuration file, defaults must be used"""
        search_config = load_search_config()
        self.assertEqual(search_config, SearchConfig())
        self.assertEqual(search_config.endpoint_url, DEFAULT_SEARCH_ENDPOINT)
        self.assertIsNone(search_config.collection)
        self.assertEqual(search_config.query, {})
        self.assertFalse(search_config.depaginate)
        self.assertEqual(search_config.glob_patterns, ())

    def test_search_config_from_yaml(self):
        """A YAML configuration file must be loaded"""
        search_config = load_search_config(os.path.join(CONF_PATH, "search_conf.yml"))
        self.assertEqual(
            search_config.endpoint_url,
            "https://catalogue.example.com/resto/api/collections/",
        )
        self.assertEqual(search_config.collection, "Sentinel2")
        self.assertTrue(search_config.depaginate)
        self.assertDictEqual(
            search_config.query,
            {"productType": "S2MSI1C", "startDate": "2024-01-01", "maxRecords": 2},
        )
        self.assertEqual(
            search_config.glob_patterns, ("*.xml", "*/IMG_DATA/*_B04.jp2")
        )

    def test_search_config_from_json(self):
        """A JSON configuration file must be loaded, with defaults for missing keys"""
        search_config = load_search_config(os.path.join(CONF_PATH, "search_conf.json"))
        self.assertEqual(search_config.endpoint_url, DEFAULT_SEARCH_ENDPOINT)
        self.assertEqual(search_config.collection, "Sentinel1")
        self.assertFalse(search_config.depaginate)
        self.assertDictEqual(
            search_config.query, {"productType": "GRD", "sortParam": "startDate"}
        )
        self.assertEqual(search_config.glob_patterns, ())

    def test_search_config_empty_file(self):
        """An empty configuration file must give the defaults"""
        self.assertEqual(load_search_config(self.write_conf("")), SearchConfig())

    def test_search_config_unknown_key(self):
        """Unknown keys must be logged and ignored"""
        conf_path = self.write_conf("collection: S2\nfoo: bar\n")
        with self.assertLogs("cdsdl.config", level="WARNING") as cm:
            search_config = load_search_config(conf_path)
        self.assertEqual(search_config.collection, "S2")
        self.assertIn("Unknown configuration key 'foo'", cm.output[0])

    def test_search_config_wrong_types(self):
        """Values of unexpected types must raise MisconfiguredError"""
        for content in (
            "depaginate: 'yes'\n",
            "query: [a, b]\n",
            "collection: 12\n",
            "globPatterns: '*.xml'\n",
            "globPatterns: ['*.xml', 3]\n",
            "endpointUrl: true\n",
        ):
            with self.subTest(content=content):
                with self.assertRaises(MisconfiguredError):
                    load_search_config(self.write_conf(content))

    def test_search_config_malformed_file(self):
        """Unreadable or malformed configuration files must raise MisconfiguredError"""
        for content in ("foo: [bar\n", "- a\n- b\n"):
            with self.subTest(content=content):
                with self.assertRaises(MisconfiguredError):
                    load_search_config(self.write_conf(content))
        with self.assertRaises(MisconfiguredError):
            load_yml_config(os.path.join(self.tmp_dir.name, "missing.yml"))


class TestKeysConfig(unittest.TestCase):
    def test_keys_config_defaults(self):
        """Without keys file, default endpoint and unset credentials must be used"""
        keys = load_keys_config()
        self.assertEqual(keys, KeysConfig(DEFAULT_S3_ENDPOINT, NOT_SET, NOT_SET))

    def test_keys_config_from_file(self):
        """A keys file must be loaded"""
        keys = load_keys_config(os.path.join(CONF_PATH, "keys.yml"))
        self.assertEqual(keys.endpoint_url, "https://s3.example.com/")
        self.assertEqual(keys.access_key_id, "my-access-key")
        self.assertEqual(keys.secret_access_key, "my-secret-key")

    def test_keys_config_missing_credential(self):
        """A keys file without both credentials must raise MisconfiguredError"""
        with self.assertRaisesRegex(MisconfiguredError, "secretAccessKey"):
            load_keys_config(os.path.join(CONF_PATH, "keys_missing_secret.json"))


class TestStorageConfig(unittest.TestCase):
    def setUp(self):
        super(TestStorageConfig, self).setUp()
        self.keys = KeysConfig("https://s3.example.com/", "key-id", "secret")

    def test_build_storage_config_from_keys(self):
        """Keys configuration values must be used when nothing overrides them"""
        storage_config = build_storage_config(self.keys, glob_patterns=("*.xml",))
        self.assertEqual(storage_config.endpoint_url, "https://s3.example.com/")
        self.assertEqual(storage_config.access_key_id, "key-id")
        self.assertEqual(storage_config.secret_access_key, "secret")
        self.assertEqual(storage_config.output_dir, ".")
        self.assertEqual(storage_config.glob_patterns, (GlobPattern("*.xml"),))

    def test_build_storage_config_overrides(self):
        """Explicit values must override the keys configuration"""
        storage_config = build_storage_config(
            self.keys,
            output_dir="/tmp/out",
            endpoint_url="http://localhost:9000",
            access_key_id="other-id",
            secret_access_key="other-secret",
        )
        self.assertEqual(
            storage_config,
            StorageConfig(
                "http://localhost:9000", "other-id", "other-secret", "/tmp/out"
            ),
        )

    def test_build_storage_config_invalid_glob(self):
        """An invalid glob pattern must abort the configuration"""
        with self.assertRaises(InvalidGlobPattern):
            build_storage_config(self.keys, glob_patterns=("*.xml", "*.[jp2"))

    def test_storage_config_frozen_and_masked(self):
        """Storage configuration must be immutable and must not show its secret"""
        storage_config = build_storage_config(self.keys)
        with self.assertRaises(AttributeError):
            storage_config.output_dir = "/elsewhere"
        self.assertNotIn("secret", repr(storage_config).replace("secret_access_key", ""))
