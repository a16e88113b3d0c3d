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

import concurrent.futures
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Union

from cdsdl.utils import DEFAULT_MAX_CONCURRENCY, ProgressCallback
from cdsdl.utils.exceptions import MisconfiguredError

if TYPE_CHECKING:
    from typing import Iterable

    from cdsdl.api.product import Product
    from cdsdl.plugins.download.s3 import S3Download


logger = logging.getLogger("cdsdl.core")


@dataclass
class DownloadFailure:
    """Something that could not be downloaded

    :param product: Identifier of the product concerned
    :param key: Key of the object that failed, ``None`` if the whole product failed
    :param error: The error raised
    """

    product: str
    key: Optional[str]
    error: Exception

    @property
    def kind(self) -> str:
        """Name of the error class"""
        return type(self.error).__name__

    @property
    def cause(self) -> Optional[BaseException]:
        """Underlying error, if the error was chained to one"""
        return self.error.__cause__

    def __str__(self) -> str:
        message = f"{self.product}: {self.kind}: {self.error}"
        if self.key is not None:
            message = f"{self.product} ({self.key}): {self.kind}: {self.error}"
        if self.cause is not None:
            message += f" (caused by {type(self.cause).__name__}: {self.cause})"
        return message


@dataclass
class ProductDownload:
    """Outcome of the download of one product"""

    product: str
    paths: list[str] = field(default_factory=list)
    failures: list[DownloadFailure] = field(default_factory=list)


@dataclass
class DownloadReport:
    """Outcome of a whole run: every written path and every failure"""

    paths: list[str] = field(default_factory=list)
    failures: list[DownloadFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Whether nothing failed"""
        return not self.failures

    def add(self, product_download: ProductDownload) -> None:
        """Merge the outcome of one product into the report"""
        self.paths.extend(product_download.paths)
        self.failures.extend(product_download.failures)


def download_all(
    products: Iterable[Union[Product, str]],
    downloader: S3Download,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    progress_callback: Optional[ProgressCallback] = None,
) -> DownloadReport:
    """Download all the given products, at most ``max_concurrency`` at a time.

    Each product is handled by :meth:`S3Download.download_product` in a worker
    thread. Whatever happens to a product, be it a listing error or an unexpected
    exception, is recorded in the report and never stops the other products.

    :param products: Products, or their identifiers, to download
    :param downloader: Downloader shared by all the workers
    :param max_concurrency: (optional) Maximum number of products downloaded at
                            the same time
    :param progress_callback: (optional) A progress callback updated once per
                              finished product
    :returns: The written paths and the failures, in completion order
    :raises: :class:`~cdsdl.utils.exceptions.MisconfiguredError`
    """
    if max_concurrency < 1:
        raise MisconfiguredError(
            f"Parallelism must be at least 1, got {max_concurrency}"
        )
    product_keys = [str(product) for product in products]
    report = DownloadReport()
    if not product_keys:
        logger.info("No product to download")
        return report

    close_progress_callback = False
    if progress_callback is None:
        progress_callback = ProgressCallback(
            total=len(product_keys),
            unit="product",
            unit_scale=False,
            desc="Downloaded products",
        )
        close_progress_callback = True

    logger.debug(
        "Downloading %s products with %s workers", len(product_keys), max_concurrency
    )
    try:
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=max_concurrency
        ) as executor:
            future_to_product = {
                executor.submit(downloader.download_product, product_key): product_key
                for product_key in product_keys
            }
            for future in concurrent.futures.as_completed(future_to_product):
                product_key = future_to_product[future]
                try:
                    report.add(future.result())
                except Exception as e:
                    logger.warning("Couldn't download product %s: %s", product_key, e)
                    report.failures.append(DownloadFailure(product_key, None, e))
                progress_callback(1)
    finally:
        if close_progress_callback:
            progress_callback.close()

    logger.info(
        "%s files downloaded, %s failures", len(report.paths), len(report.failures)
    )
    return report
