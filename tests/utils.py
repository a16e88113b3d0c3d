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
from typing import Any, Optional

# All tests files should import mock from this place
from unittest import mock  # noqa

SEARCH_URL = "https://catalogue.example.com/resto/api/collections/Sentinel2/search.json"


def resto_feature(product_identifier: str, **properties: Any) -> dict[str, Any]:
    """Build a feature like the ones of a resto search result

    :param product_identifier: Key of the product in the object storage
    :returns: GeoJSON feature
    """
    return {
        "type": "Feature",
        "id": product_identifier.rsplit("/", 1)[-1],
        "geometry": None,
        "properties": dict(productIdentifier=product_identifier, **properties),
    }


def resto_page(
    product_identifiers: list[str], next_url: Optional[str] = None
) -> dict[str, Any]:
    """Build a resto search result page

    :param product_identifiers: Keys of the products of the page
    :param next_url: (optional) URL of the next page
    :returns: GeoJSON feature collection
    """
    links = [{"rel": "self", "href": SEARCH_URL}]
    if next_url is not None:
        links.append({"rel": "next", "href": next_url})
    return {
        "type": "FeatureCollection",
        "features": [resto_feature(pid) for pid in product_identifiers],
        "properties": {"totalResults": None, "links": links},
    }
