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
"""CDSDL Command Line interface

Usage: cdsdl [OPTIONS] COMMAND [ARGS]...

  Copernicus Data Space downloader: search products and download their files
  from the object storage

Options:
  -v, --verbose  Control the verbosity of the logs. For maximum verbosity,
                 type -vv
  --help         Show this message and exit.

Commands:
  download  Search products and download the files selected by the glob...
  search    Search products and print their identifiers
  version   Print cdsdl version and exit

  noqa: D103
"""
from __future__ import annotations

import sys
from importlib.metadata import metadata
from typing import TYPE_CHECKING, Any, NoReturn, Optional

import click
from click import Context

from cdsdl.api.core import download_all
from cdsdl.config import build_storage_config, load_keys_config, load_search_config
from cdsdl.plugins.download.s3 import S3Download
from cdsdl.plugins.search.resto import search
from cdsdl.utils import DEFAULT_MAX_CONCURRENCY
from cdsdl.utils.exceptions import CdsdlError
from cdsdl.utils.geometry import load_geometry_wkt
from cdsdl.utils.logging import setup_logging

if TYPE_CHECKING:
    from cdsdl.api.product import Product
    from cdsdl.config import SearchConfig

conf_option = click.option(
    "-c",
    "--conf",
    envvar="CDSDL_CONF",
    type=click.Path(exists=True, dir_okay=False),
    help="File path to the search configuration file (YAML or JSON). Default "
    "configuration searches the whole catalogue and downloads everything",
)
geometry_option = click.option(
    "-g",
    "--geometry",
    envvar="CDSDL_GEOMETRY",
    type=click.Path(exists=True, dir_okay=False),
    help="File path to a GeoJSON file holding the geometry of interest",
)


def _fail(error: CdsdlError) -> NoReturn:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _search_products(
    search_config: SearchConfig, geometry: Optional[str]
) -> list[Product]:
    wkt = load_geometry_wkt(geometry) if geometry else None
    return search(
        endpoint_url=search_config.endpoint_url,
        collection=search_config.collection,
        query=search_config.query,
        geometry=wkt,
        depaginate=search_config.depaginate,
    )


@click.group()
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Control the verbosity of the logs. For maximum verbosity, type -vv",
)
@click.pass_context
def cdsdl(ctx: Context, verbose: int) -> None:
    """Copernicus Data Space downloader: search products and download their files
    from the object storage"""
    if ctx.obj is None:
        ctx.obj = {}
    ctx.obj["verbosity"] = min(verbose + 1, 3)


@cdsdl.command(name="version", help="Print cdsdl version and exit")
def version() -> None:
    """Print cdsdl version and exit"""
    click.echo(
        "{__title__} ({__description__}): version {__version__}".format(
            __title__=metadata("cdsdl")["Name"],
            __description__=metadata("cdsdl")["Summary"],
            __version__=metadata("cdsdl")["Version"],
        )
    )


@cdsdl.command(name="search", help="Search products and print their identifiers")
@conf_option
@geometry_option
@click.pass_context
def search_products(ctx: Context, **kwargs: Any) -> None:
    """Search products and print one identifier per line"""
    setup_logging(verbose=ctx.obj["verbosity"])
    try:
        products = _search_products(
            load_search_config(kwargs["conf"]), kwargs["geometry"]
        )
    except CdsdlError as e:
        _fail(e)
    for product in products:
        click.echo(product.product_identifier)


@cdsdl.command(
    name="download",
    help="Search products and download the files selected by the glob patterns of "
    "the configuration from the object storage",
)
@conf_option
@geometry_option
@click.option(
    "-k",
    "--keys-file",
    envvar="CDSDL_KEYS_FILE",
    type=click.Path(exists=True, dir_okay=False),
    help="File path to the S3 keys file (endpointUrl, accessKeyId, "
    "secretAccessKey)",
)
@click.option(
    "--s3-endpoint-url",
    envvar="CDSDL_S3_ENDPOINT_URL",
    help="S3 endpoint URL, overrides the one of the keys file",
)
@click.option(
    "--s3-access-key-id",
    envvar="CDSDL_S3_ACCESS_KEY_ID",
    help="S3 access key id, overrides the one of the keys file",
)
@click.option(
    "--s3-secret-access-key",
    envvar="CDSDL_S3_SECRET_ACCESS_KEY",
    help="S3 secret access key, overrides the one of the keys file",
)
@click.option(
    "-o",
    "--output",
    envvar="CDSDL_OUTPUT",
    type=click.Path(file_okay=False, writable=True),
    default=".",
    show_default=True,
    help="Directory where products are downloaded",
)
@click.option(
    "-p",
    "--parallelism",
    envvar="CDSDL_PARALLELISM",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_CONCURRENCY,
    show_default=True,
    help="Maximum number of products downloaded at the same time",
)
@click.pass_context
def download(ctx: Context, **kwargs: Any) -> None:
    """Search products and download them"""
    setup_logging(verbose=ctx.obj["verbosity"])
    try:
        search_config = load_search_config(kwargs["conf"])
        # compile glob patterns before any request is sent
        storage_config = build_storage_config(
            load_keys_config(kwargs["keys_file"]),
            glob_patterns=search_config.glob_patterns,
            output_dir=kwargs["output"],
            endpoint_url=kwargs["s3_endpoint_url"],
            access_key_id=kwargs["s3_access_key_id"],
            secret_access_key=kwargs["s3_secret_access_key"],
        )
        products = _search_products(search_config, kwargs["geometry"])
        downloader = S3Download(storage_config)
        report = download_all(
            products, downloader, max_concurrency=kwargs["parallelism"]
        )
    except CdsdlError as e:
        _fail(e)

    for path in report.paths:
        click.echo(f"Downloaded {path}")
    for failure in report.failures:
        click.echo(f"Couldn't download {failure}", err=True)


if __name__ == "__main__":
    cdsdl(obj={})
