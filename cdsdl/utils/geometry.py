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
from typing import Any

import orjson
from shapely.errors import GeometryTypeError
from shapely.geometry import GeometryCollection, MultiPolygon, Point, Polygon, shape
from shapely.geometry.base import BaseGeometry

from cdsdl.utils.exceptions import MisconfiguredError

logger = logging.getLogger("cdsdl.utils.geometry")

SEARCHABLE_GEOMETRY_TYPES = (Point, Polygon, MultiPolygon)


def geometry_from_geojson(geojson: dict[str, Any]) -> BaseGeometry:
    """Build a shapely geometry from a GeoJSON Geometry, Feature or
    FeatureCollection object

    A FeatureCollection becomes a GeometryCollection of its features geometries.
    """
    if not isinstance(geojson, dict):
        raise MisconfiguredError("GeoJSON object expected")
    geojson_type = geojson.get("type")
    try:
        if geojson_type == "FeatureCollection":
            return GeometryCollection(
                [
                    geometry_from_geojson(feature)
                    for feature in geojson.get("features") or []
                ]
            )
        elif geojson_type == "Feature":
            return shape(geojson["geometry"])
        return shape(geojson)
    except (KeyError, TypeError, ValueError, GeometryTypeError) as e:
        raise MisconfiguredError(
            f"Couldn't convert GeoJSON into simple geometry: {e}"
        ) from e


def extract_wkt(geometry: BaseGeometry) -> str:
    """WKT of a point, polygon or multipolygon.

    A collection holding exactly one of them is unwrapped.
    """
    if isinstance(geometry, GeometryCollection) and len(geometry.geoms) == 1:
        return extract_wkt(geometry.geoms[0])
    if isinstance(geometry, SEARCHABLE_GEOMETRY_TYPES):
        return geometry.wkt
    raise MisconfiguredError(
        f"Geometry is not a point, polygon or multipolygon: {geometry.geom_type}"
    )


def load_geometry_wkt(geometry_file_path: str) -> str:
    """Read a GeoJSON file and return the WKT of its geometry

    :param geometry_file_path: Path to a GeoJSON file
    :returns: WKT representation of the geometry, usable as a search parameter
    :raises: :class:`~cdsdl.utils.exceptions.MisconfiguredError`
    """
    try:
        with open(geometry_file_path, "rb") as fh:
            geojson = orjson.loads(fh.read())
    except OSError as e:
        raise MisconfiguredError(
            f"Couldn't open geometry file {geometry_file_path}"
        ) from e
    except orjson.JSONDecodeError as e:
        raise MisconfiguredError(
            f"Geometry file {geometry_file_path} is not properly GeoJSON-encoded"
        ) from e
    wkt = extract_wkt(geometry_from_geojson(geojson))
    logger.debug("Geometry loaded from %s: %s", geometry_file_path, wkt)
    return wkt
