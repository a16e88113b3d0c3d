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
from __future__ import annotations

import logging
import os
from contextlib import closing
from typing import TYPE_CHECKING, Optional

from botocore.exceptions import BotoCoreError, ClientError

from cdsdl.api.core import DownloadFailure, ProductDownload
from cdsdl.plugins.authentication.aws_auth import create_s3_client, is_auth_error
from cdsdl.utils import (
    DEFAULT_CHUNK_SIZE,
    local_folder,
    makedirs,
    product_prefix,
    split_key,
)
from cdsdl.utils.exceptions import (
    GetObjectFailed,
    ListFailed,
    LocalIOFailed,
)
from cdsdl.utils.patterns import matches_glob_patterns

if TYPE_CHECKING:
    from typing import Iterator

    from botocore.response import StreamingBody
    from mypy_boto3_s3.client import S3Client

    from cdsdl.config import StorageConfig


logger = logging.getLogger("cdsdl.download.s3")


class S3Download:
    """Download products objects from an S3-compatible object storage.

    Products are identified by keys like ``/<bucket>/<path>``: all the objects found
    under ``<path>/`` in ``<bucket>`` and selected by the glob patterns of the
    configuration are downloaded, keeping their tree structure below the parent
    folder of the product.

    :param config: Storage configuration, shared read-only by all the downloads
    :param s3_client: (optional) S3 client to use instead of creating one from
                      ``config``
    """

    def __init__(
        self, config: StorageConfig, s3_client: Optional[S3Client] = None
    ) -> None:
        self.config = config
        self.s3_client = (
            s3_client if s3_client is not None else create_s3_client(config)
        )

    def list_subkeys(self, product_key: str) -> list[str]:
        """List the keys of all the objects of a product

        :param product_key: Product identifier, as ``/<bucket>/<path>``
        :returns: Objects keys, as ``/<bucket>/<object key>``, in listing order
        :raises: :class:`~cdsdl.utils.exceptions.MalformedKey`
        :raises: :class:`~cdsdl.utils.exceptions.ListFailed`
        """
        bucket, path = split_key(product_key)
        prefix = f"{path}/"
        subkeys = []
        try:
            paginator = self.s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    if obj["Key"].endswith("/"):
                        logger.debug("Skipping folder placeholder %s", obj["Key"])
                        continue
                    subkeys.append(f"/{bucket}/{obj['Key']}")
        except ClientError as e:
            message = f"Failed to list keys under {prefix!r} in bucket {bucket!r}"
            if is_auth_error(e):
                message += ", please check your credentials"
            raise ListFailed(f"{message}: {e}") from e
        except BotoCoreError as e:
            raise ListFailed(
                f"Failed to list keys under {prefix!r} in bucket {bucket!r}: {e}"
            ) from e
        logger.debug("%s keys found under %s", len(subkeys), product_key)
        return subkeys

    def download(self, key: str, relative_to: str) -> str:
        """Download an object onto disk

        The object is written in the output directory, in a sub-folder mirroring the
        part of ``key`` that follows ``relative_to``. Created folders are kept, and a
        partially written file is left as is, if the download fails.

        :param key: Object key, as ``/<bucket>/<path>``
        :param relative_to: Prefix of ``key`` that is not reproduced locally
        :returns: The absolute path to the downloaded file
        :raises: :class:`~cdsdl.utils.exceptions.MalformedKey`
        :raises: :class:`~cdsdl.utils.exceptions.NotRelative`
        :raises: :class:`~cdsdl.utils.exceptions.GetObjectFailed`
        :raises: :class:`~cdsdl.utils.exceptions.LocalIOFailed`
        """
        bucket, real_key = split_key(key)
        folder = local_folder(key, relative_to, self.config.output_dir)
        try:
            makedirs(folder)
        except OSError as e:
            raise LocalIOFailed(f"Couldn't create local folder {folder}: {e}") from e

        try:
            response = self.s3_client.get_object(Bucket=bucket, Key=real_key)
        except (ClientError, BotoCoreError) as e:
            raise GetObjectFailed(
                f"Failed to download object {real_key!r} from bucket {bucket!r}: {e}"
            ) from e

        file_path = os.path.abspath(os.path.join(folder, key.rsplit("/", 1)[-1]))
        try:
            with closing(response["Body"]) as body, open(file_path, "wb") as fh:
                for chunk in self._iter_body(body, real_key, bucket):
                    fh.write(chunk)
        except (OSError, ValueError) as e:
            raise LocalIOFailed(
                f"Failed to save the contents of remote object {real_key!r} from "
                f"bucket {bucket!r} into local file {file_path}: {e}"
            ) from e
        return file_path

    @staticmethod
    def _iter_body(
        body: StreamingBody, real_key: str, bucket: str
    ) -> Iterator[bytes]:
        chunks = body.iter_chunks(chunk_size=DEFAULT_CHUNK_SIZE)
        while True:
            try:
                chunk = next(chunks, None)
            except (ClientError, BotoCoreError) as e:
                raise GetObjectFailed(
                    f"Failed to read object {real_key!r} from bucket {bucket!r}: {e}"
                ) from e
            if chunk is None:
                return
            yield chunk

    def download_product(self, product_key: str) -> ProductDownload:
        """Download all the objects of a product that match the glob patterns

        Objects are downloaded one after the other, in listing order. The failure
        of one of them is logged and recorded, and does not stop the others.

        :param product_key: Product identifier, as ``/<bucket>/<path>``
        :returns: The paths written and the objects that could not be downloaded
        :raises: :class:`~cdsdl.utils.exceptions.MalformedKey`
        :raises: :class:`~cdsdl.utils.exceptions.ListFailed`
        """
        relative_to = product_prefix(product_key)
        result = ProductDownload(product_key)
        for leaf_key in self.list_subkeys(product_key):
            if not matches_glob_patterns(self.config.glob_patterns, leaf_key):
                logger.info("Skipping key %s", leaf_key)
                continue
            logger.info("Downloading key %s", leaf_key)
            try:
                result.paths.append(self.download(leaf_key, relative_to))
            except Exception as e:
                logger.warning("Couldn't download key %s: %s", leaf_key, e)
                result.failures.append(DownloadFailure(product_key, leaf_key, e))
        return result
