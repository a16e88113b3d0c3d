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

from dataclasses import dataclass, field
from typing import Any, Optional

from cdsdl.utils.exceptions import SearchResponseMalformed


@dataclass(frozen=True)
class Product:
    """A search result, identified by the key of its location in the object
    storage (``/<bucket>/<path...>``)

    :param product_identifier: Opaque product key, as given by the catalogue
    :param properties: All the properties of the feature, kept for display
    """

    product_identifier: str
    properties: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_feature(cls, feature: Any) -> Product:
        """Build a product from a GeoJSON feature of a search result

        :raises: :class:`~cdsdl.utils.exceptions.SearchResponseMalformed`
        """
        properties = feature.get("properties") if isinstance(feature, dict) else None
        if not isinstance(properties, dict):
            raise SearchResponseMalformed("Feature without properties in search result")
        product_identifier = properties.get("productIdentifier")
        if not isinstance(product_identifier, str):
            raise SearchResponseMalformed(
                "Feature without productIdentifier in search result: %s"
                % feature.get("id", "<no id>")
            )
        return cls(product_identifier, properties)

    @property
    def title(self) -> Optional[str]:
        """Product title, if the catalogue gave one"""
        return self.properties.get("title")

    def __str__(self) -> str:
        return self.product_identifier
