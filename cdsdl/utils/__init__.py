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
"""Miscellaneous utilities to be used throughout cdsdl.

Everything that does not fit into one of the specialised categories of utilities in
this package should go here, most notably the translation of remote object keys
(``/<bucket>/<path>``) into bucket names, object paths and local folders.
"""
from __future__ import annotations

import logging as py_logging
import os
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Optional

from tqdm.auto import tqdm

from cdsdl.utils import logging as cdsdl_logging
from cdsdl.utils.exceptions import MalformedKey, NotRelative

logger = py_logging.getLogger("cdsdl.utils")

try:
    cdsdl_version = version("cdsdl")
except PackageNotFoundError:  # pragma: no cover
    cdsdl_version = "0.0.0.dev0"

APP_NAME = "cdsdl"
USER_AGENT = {"User-Agent": f"{APP_NAME}/{cdsdl_version}"}

DEFAULT_SEARCH_TIMEOUT = 20  # in seconds
DEFAULT_MAX_CONCURRENCY = 5
DEFAULT_CHUNK_SIZE = 1024 * 1024  # in bytes

# Source: https://documentation.dataspace.copernicus.eu/APIs/OpenSearch.html#general-rules
DEFAULT_SEARCH_ENDPOINT = (
    "https://catalogue.dataspace.copernicus.eu/resto/api/collections/"
)
# Source: https://documentation.dataspace.copernicus.eu/APIs/S3.html#object-storage-endpoints
DEFAULT_S3_ENDPOINT = "https://eodata.dataspace.copernicus.eu/"
# Region is not meaningful for path-style access to this kind of endpoint
DEFAULT_S3_REGION = "us-east-1"
NOT_SET = "not-set"


class ProgressCallback(tqdm):
    """A callable used to render progress to users for long running processes.

    It inherits from `tqdm.auto.tqdm`, and accepts the same arguments on
    instantiation: `iterable`, `desc`, `total`, `leave`, `file`, `ncols`,
    `mininterval`, `maxinterval`, `miniters`, `ascii`, `disable`, `unit`,
    `unit_scale`, `dynamic_ncols`, `smoothing`, `bar_format`, `initial`,
    `position`, `postfix`, `unit_divisor`.

    It can be globally disabled using `cdsdl.utils.logging.setup_logging(0)` or
    `cdsdl.utils.logging.setup_logging(level, no_progress_bar=True)`, and
    individually disabled using `disable=True`.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.kwargs = kwargs.copy()
        kwargs.setdefault("unit", "B")
        kwargs.setdefault("unit_scale", True)
        kwargs.setdefault("desc", "")
        kwargs.setdefault("position", 0)
        kwargs.setdefault("disable", cdsdl_logging.disable_tqdm)
        kwargs.setdefault("dynamic_ncols", True)

        super(ProgressCallback, self).__init__(*args, **kwargs)

    def __call__(self, increment: int, total: Optional[int] = None) -> None:
        """Update the progress bar.

        :param increment: Amount of data already processed
        :param total: (optional) Maximum amount of data to be processed
        """
        if total is not None and total != self.total:
            self.reset(total=total)

        self.update(increment)


def makedirs(dirpath: str) -> None:
    """Create a directory in filesystem with parents if necessary.

    Creating an already existing directory is a no-op, also when several
    threads create the same tree at the same time.
    """
    os.makedirs(dirpath, exist_ok=True)


def split_key(key: str) -> tuple[str, str]:
    """Split a remote key into its bucket name and the object path inside it

    >>> split_key("/eodata/Sentinel-2/MSI/L1C/S2A.SAFE")
    ('eodata', 'Sentinel-2/MSI/L1C/S2A.SAFE')

    :param key: Key structured as ``/<bucket>/<path...>``
    :returns: bucket name and object path
    :raises: :class:`~cdsdl.utils.exceptions.MalformedKey`
    """
    if not key.startswith("/"):
        raise MalformedKey(key, "missing leading slash")
    segments = key.split("/")[1:]
    if not segments[0]:
        raise MalformedKey(key, "missing bucket")
    if len(segments) < 2:
        raise MalformedKey(key, "missing object path")
    if not all(segments[1:]):
        raise MalformedKey(key, "empty path segment")
    return segments[0], "/".join(segments[1:])


def product_prefix(product_key: str) -> str:
    """Common prefix of the objects of a product, against which their local paths
    are computed

    >>> product_prefix("/eodata/Sentinel-2/S2A.SAFE")
    '/eodata/Sentinel-2/'
    """
    split_key(product_key)
    return product_key.rsplit("/", 1)[0] + "/"


def local_folder(key: str, relative_to: str, target_root: str) -> str:
    """Local folder where the object identified by ``key`` must be written

    ``relative_to`` is stripped from ``key``, and what remains of the key without its
    last segment (the file name) is joined to ``target_root``.

    >>> local_folder("/eodata/S2/P.SAFE/GRANULE/B01.jp2", "/eodata/S2/", "/tmp")
    '/tmp/P.SAFE/GRANULE'

    :raises: :class:`~cdsdl.utils.exceptions.NotRelative`
    :raises: :class:`~cdsdl.utils.exceptions.MalformedKey`
    """
    if not key.startswith(relative_to):
        raise NotRelative(key, relative_to)
    folders = key[len(relative_to) :].split("/")[:-1]
    for folder in folders:
        if folder in ("", ".", ".."):
            raise MalformedKey(key, f"unusable folder name {folder!r}")
    return os.path.join(target_root, *folders)
