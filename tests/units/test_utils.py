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
import threading
import unittest
from tempfile import TemporaryDirectory

from tests.context import (
    MalformedKey,
    NotRelative,
    ProgressCallback,
    get_logging_verbose,
    local_folder,
    makedirs,
    product_prefix,
    setup_logging,
    split_key,
)


class TestUtils(unittest.TestCase):
    def test_split_key(self):
        """split_key must return the bucket and the object path"""
        self.assertEqual(
            split_key("/eodata/Sentinel-2/MSI/L1C/2024/01/01/S2A.SAFE"),
            ("eodata", "Sentinel-2/MSI/L1C/2024/01/01/S2A.SAFE"),
        )
        self.assertEqual(split_key("/bucketA/S2A_MSI"), ("bucketA", "S2A_MSI"))
        self.assertEqual(split_key("/b/a/b/c"), ("b", "a/b/c"))

    def test_split_key_join_recovers_key(self):
        """Joining the parts returned by split_key must give back the key"""
        for key in (
            "/eodata/Sentinel-1/SAR/GRD/S1A.SAFE",
            "/bucketA/S2A_MSI/data/B01.jp2",
            "/b/p",
        ):
            bucket, path = split_key(key)
            self.assertEqual(f"/{bucket}/{path}", key)

    def test_split_key_malformed(self):
        """split_key must refuse keys that are not /<bucket>/<path>"""
        for key in (
            "",
            "/",
            "/bucket",
            "//path/to/object",
            "bucket/path",
            "/bucket/",
            "/bucket//path",
            "/bucket/path/",
        ):
            with self.subTest(key=key):
                with self.assertRaises(MalformedKey):
                    split_key(key)

    def test_product_prefix(self):
        """product_prefix must drop the last segment of the product key"""
        self.assertEqual(product_prefix("/bucketA/S2A_MSI"), "/bucketA/")
        self.assertEqual(
            product_prefix("/eodata/Sentinel-2/MSI/L1C/S2A.SAFE"),
            "/eodata/Sentinel-2/MSI/L1C/",
        )
        with self.assertRaises(MalformedKey):
            product_prefix("/bucketA")

    def test_local_folder(self):
        """local_folder must reproduce the tree of the key below relative_to"""
        self.assertEqual(
            local_folder("/bucketA/S2A_MSI/manifest.xml", "/bucketA/", "/tmp/out"),
            os.path.join("/tmp/out", "S2A_MSI"),
        )
        self.assertEqual(
            local_folder(
                "/bucketA/S2A_MSI/GRANULE/L1C/IMG_DATA/B01.jp2", "/bucketA/", "out"
            ),
            os.path.join("out", "S2A_MSI", "GRANULE", "L1C", "IMG_DATA"),
        )
        # object directly under relative_to
        self.assertEqual(local_folder("/b/file.txt", "/b/", "out"), "out")

    def test_local_folder_not_relative(self):
        """local_folder must fail if the key does not start with relative_to"""
        with self.assertRaises(NotRelative):
            local_folder("/bucketB/S2A_MSI/manifest.xml", "/bucketA/", "/tmp/out")

    def test_local_folder_unusable_folder(self):
        """local_folder must refuse folder names that would escape target_root"""
        for key in (
            "/b/P/../../etc/passwd",
            "/b/P/./manifest.xml",
            "/b/P//manifest.xml",
        ):
            with self.subTest(key=key):
                with self.assertRaises(MalformedKey):
                    local_folder(key, "/b/", "/tmp/out")

    def test_makedirs_idempotent(self):
        """makedirs must succeed on existing and concurrently created directories"""
        with TemporaryDirectory() as tmp_dir:
            target = os.path.join(tmp_dir, "a", "b", "c")
            makedirs(target)
            makedirs(target)
            self.assertTrue(os.path.isdir(target))

            concurrent_target = os.path.join(tmp_dir, "x", "y", "z")
            errors = []

            def create():
                try:
                    makedirs(concurrent_target)
                except OSError as e:
                    errors.append(e)

            threads = [threading.Thread(target=create) for _ in range(8)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()
            self.assertEqual(errors, [])
            self.assertTrue(os.path.isdir(concurrent_target))


class TestProgressCallback(unittest.TestCase):
    def tearDown(self):
        super(TestProgressCallback, self).tearDown()
        setup_logging(1)

    def test_progress_callback_update(self):
        """ProgressCallback must be updatable and resettable through its call"""
        setup_logging(1)
        with ProgressCallback(total=10, unit="product", unit_scale=False) as bar:
            bar(2)
            self.assertEqual(bar.n, 2)
            bar(1, total=5)
            self.assertEqual(bar.total, 5)
            self.assertEqual(bar.n, 1)

    def test_progress_callback_disabled(self):
        """ProgressCallback must be disabled when logging is fully muted"""
        setup_logging(0)
        with ProgressCallback(total=1) as bar:
            self.assertTrue(bar.disable)
        setup_logging(1)
        with ProgressCallback(total=1) as bar:
            self.assertFalse(bar.disable)


class TestLogging(unittest.TestCase):
    def tearDown(self):
        super(TestLogging, self).tearDown()
        setup_logging(1)

    def test_logging_verbose_levels(self):
        """Logging verbosity must be readable back after setup"""
        for verbose in (0, 1, 2, 3):
            with self.subTest(verbose=verbose):
                setup_logging(verbose)
                self.assertEqual(get_logging_verbose(), verbose)

    def test_logging_invalid_level(self):
        """Unknown verbosity levels must be refused"""
        with self.assertRaises(ValueError):
            setup_logging(4)
