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
"""Search on the OpenSearch (resto) API of the Copernicus Data Space Ecosystem"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

import requests

from cdsdl.api.product import Product
from cdsdl.utils import DEFAULT_SEARCH_ENDPOINT, DEFAULT_SEARCH_TIMEOUT, USER_AGENT
from cdsdl.utils.exceptions import (
    MisconfiguredError,
    SearchRequestFailed,
    SearchResponseMalformed,
)

if TYPE_CHECKING:
    from typing import Iterator, Mapping

logger = logging.getLogger("cdsdl.search.resto")


@dataclass
class SearchPage:
    """One page of search results"""

    products: list[Product] = field(default_factory=list)
    #: URL of the next page, if any
    next_url: Optional[str] = None


class RestoSearch:
    """Search products on a resto OpenSearch endpoint.

    Requests are sent to ``<endpoint_url>[/<collection>]/search.json``, with the
    query parameters in the query string. Results are GeoJSON feature collections
    whose features hold a ``productIdentifier`` property and whose
    ``properties.links`` may give the URL of the next page (``rel == "next"``).

    :param endpoint_url: Base URL of the collections API
    :param collection: (optional) Collection to search in
    :param timeout: (optional) Timeout in seconds of each request
    """

    def __init__(
        self,
        endpoint_url: str = DEFAULT_SEARCH_ENDPOINT,
        collection: Optional[str] = None,
        timeout: float = DEFAULT_SEARCH_TIMEOUT,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.collection = collection
        self.timeout = timeout

    @property
    def query_url(self) -> str:
        """URL of the first search request"""
        base_url = self.endpoint_url.rstrip("/")
        if self.collection:
            return f"{base_url}/{self.collection}/search.json"
        return f"{base_url}/search.json"

    @staticmethod
    def build_params(
        query: Mapping[str, Any], geometry: Optional[str] = None
    ) -> dict[str, Any]:
        """Query-string parameters of the first search request

        :param query: Search parameters, sent as is
        :param geometry: (optional) WKT geometry of interest
        :raises: :class:`~cdsdl.utils.exceptions.MisconfiguredError`
        """
        params: dict[str, Any] = {}
        for key, value in query.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                params[key] = [_format_param(key, v) for v in value]
            else:
                params[key] = _format_param(key, value)
        if geometry:
            # Source:
            # https://documentation.dataspace.copernicus.eu/APIs/OpenSearch.html#geography-and-time-frame
            params["geometry"] = geometry
        return params

    def fetch_page(
        self, url: str, params: Optional[dict[str, Any]] = None
    ) -> SearchPage:
        """Send one search request and parse its result

        :param url: URL to query
        :param params: (optional) Query-string parameters
        :raises: :class:`~cdsdl.utils.exceptions.SearchRequestFailed`
        :raises: :class:`~cdsdl.utils.exceptions.SearchResponseMalformed`
        """
        try:
            response = requests.get(
                url, params=params, headers=USER_AGENT, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.Timeout as exc:
            raise SearchRequestFailed(
                f"Request timeout ({self.timeout}s) for URL {url}"
            ) from exc
        except requests.RequestException as exc:
            raise SearchRequestFailed(
                f"Search request to {url} failed: {exc}"
            ) from exc

        try:
            result = response.json()
        except ValueError as exc:
            raise SearchResponseMalformed(
                f"Search result from {response.url} is not properly JSON-encoded"
            ) from exc
        return self.parse_page(result)

    @staticmethod
    def parse_page(result: Any) -> SearchPage:
        """Extract the products and the next page URL from a search result

        :raises: :class:`~cdsdl.utils.exceptions.SearchResponseMalformed`
        """
        if not isinstance(result, dict) or not isinstance(
            result.get("features"), list
        ):
            raise SearchResponseMalformed("Search result has no 'features' list")
        products = [Product.from_feature(feature) for feature in result["features"]]

        properties = result.get("properties") or {}
        if not isinstance(properties, dict):
            raise SearchResponseMalformed(
                "Search result properties must be an object"
            )
        links = properties.get("links") or []
        if not isinstance(links, list) or not all(
            isinstance(link, dict) for link in links
        ):
            raise SearchResponseMalformed(
                "Search result links must be a list of objects"
            )
        next_url = next(
            (
                link.get("href")
                for link in links
                if link.get("rel") == "next" and isinstance(link.get("href"), str)
            ),
            None,
        )
        return SearchPage(products, next_url)

    def query(
        self,
        query: Optional[Mapping[str, Any]] = None,
        geometry: Optional[str] = None,
        depaginate: bool = False,
    ) -> Iterator[Product]:
        """Lazily iterate over the products matching the query

        Pages are fetched one after the other: the first one with the query
        parameters, the following ones (only if ``depaginate`` is set) through the
        ``next`` link of the previous page, as is.

        :param query: (optional) Search parameters
        :param geometry: (optional) WKT geometry of interest
        :param depaginate: (optional) Whether to follow ``next`` links
        :returns: Products, in pages order then in-page order
        """
        url: Optional[str] = self.query_url
        params: Optional[dict[str, Any]] = self.build_params(query or {}, geometry)
        logger.info("URL: %s", url)
        logger.info("Parameters: %s", ", ".join(params))

        fetched_urls: set[str] = set()
        while url is not None:
            fetched_urls.add(url)
            page = self.fetch_page(url, params)
            logger.info("Results: %s", len(page.products))
            yield from page.products

            if not depaginate or page.next_url is None:
                break
            if page.next_url in fetched_urls:
                logger.warning(
                    "Next page link %s was already fetched, stop paginating",
                    page.next_url,
                )
                break
            logger.debug("Following next page link %s", page.next_url)
            url, params = page.next_url, None


def _format_param(key: str, value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return value
    raise MisconfiguredError(
        f"Query parameter {key!r} must be a string, a number, a boolean or a list "
        f"of them, got {type(value).__name__}"
    )


def search(
    endpoint_url: str = DEFAULT_SEARCH_ENDPOINT,
    collection: Optional[str] = None,
    query: Optional[Mapping[str, Any]] = None,
    geometry: Optional[str] = None,
    depaginate: bool = False,
) -> list[Product]:
    """Search products and gather all of them

    :returns: The products found
    :raises: :class:`~cdsdl.utils.exceptions.SearchRequestFailed`
    :raises: :class:`~cdsdl.utils.exceptions.SearchResponseMalformed`
    """
    return list(
        RestoSearch(endpoint_url, collection).query(query, geometry, depaginate)
    )
