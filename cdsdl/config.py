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
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

import yaml

from cdsdl.utils import DEFAULT_S3_ENDPOINT, DEFAULT_SEARCH_ENDPOINT, NOT_SET
from cdsdl.utils.exceptions import MisconfiguredError
from cdsdl.utils.patterns import compile_glob_patterns

if TYPE_CHECKING:
    from cdsdl.utils.patterns import GlobPattern

logger = logging.getLogger("cdsdl.config")

SEARCH_CONFIG_KEYS = (
    "endpointUrl",
    "collection",
    "query",
    "depaginate",
    "globPatterns",
)
KEYS_CONFIG_KEYS = ("endpointUrl", "accessKeyId", "secretAccessKey")


@dataclass(frozen=True)
class SearchConfig:
    """Query and download configuration, as read from the configuration file"""

    #: Base URL of the OpenSearch (resto) collections API
    endpoint_url: str = DEFAULT_SEARCH_ENDPOINT
    #: Collection to search in, if any
    collection: Optional[str] = None
    #: Query parameters sent as is to the search endpoint
    query: dict[str, Any] = field(default_factory=dict)
    #: Whether the ``next`` links of the results must be followed
    depaginate: bool = False
    #: Glob patterns selecting the objects of the products to download
    glob_patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class KeysConfig:
    """S3 keys configuration block"""

    endpoint_url: str = DEFAULT_S3_ENDPOINT
    access_key_id: str = NOT_SET
    secret_access_key: str = NOT_SET


@dataclass(frozen=True)
class StorageConfig:
    """Everything needed to download products from the object storage.

    Built once and shared by all the download threads, it must not be mutated.
    """

    endpoint_url: str
    access_key_id: str
    secret_access_key: str
    output_dir: str = "."
    glob_patterns: tuple[GlobPattern, ...] = ()

    def __repr__(self) -> str:
        return (
            f"StorageConfig(endpoint_url={self.endpoint_url!r}, "
            f"access_key_id={self.access_key_id!r}, secret_access_key='***', "
            f"output_dir={self.output_dir!r}, glob_patterns={self.glob_patterns!r})"
        )


def load_yml_config(yml_path: str) -> dict[str, Any]:
    """Load a conf dictionary from given YAML (or JSON) file path

    :param yml_path: Path to the configuration file
    :returns: The configuration mapping, empty if the file is empty
    :raises: :class:`~cdsdl.utils.exceptions.MisconfiguredError`
    """
    logger.debug("Loading configuration from %s", yml_path)
    try:
        with open(yml_path, "r") as fh:
            config = yaml.safe_load(fh)
    except OSError as e:
        raise MisconfiguredError(
            f"Couldn't open configuration file {yml_path}"
        ) from e
    except yaml.YAMLError as e:
        logger.error("Unable to load configuration")
        raise MisconfiguredError(
            f"Configuration file {yml_path} is not properly YAML/JSON-encoded"
        ) from e
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise MisconfiguredError(
            f"Configuration file {yml_path} must contain a mapping at top level"
        )
    return config


def _check_keys(
    config: dict[str, Any], known_keys: tuple[str, ...], path: str
) -> None:
    for key in config:
        if key not in known_keys:
            logger.warning("Unknown configuration key %r ignored in %s", key, path)


def _get_typed(
    config: dict[str, Any], key: str, expected: type, default: Any, path: str
) -> Any:
    value = config.get(key, default)
    if value is default:
        return value
    if not isinstance(value, expected) or (
        expected is not bool and isinstance(value, bool)
    ):
        raise MisconfiguredError(
            f"{key!r} must be of type {expected.__name__} in {path}, "
            f"got {type(value).__name__}"
        )
    return value


def load_search_config(config_path: Optional[str] = None) -> SearchConfig:
    """Load the search configuration, using defaults when no file is given

    :param config_path: (optional) Path to the configuration file
    :returns: The search configuration
    :raises: :class:`~cdsdl.utils.exceptions.MisconfiguredError`
    """
    if not config_path:
        return SearchConfig()
    config = load_yml_config(config_path)
    _check_keys(config, SEARCH_CONFIG_KEYS, config_path)

    glob_patterns = _get_typed(config, "globPatterns", list, [], config_path)
    if not all(isinstance(p, str) for p in glob_patterns):
        raise MisconfiguredError(
            f"'globPatterns' must be a list of strings in {config_path}"
        )

    return SearchConfig(
        endpoint_url=_get_typed(
            config, "endpointUrl", str, DEFAULT_SEARCH_ENDPOINT, config_path
        ),
        collection=_get_typed(config, "collection", str, None, config_path),
        query=dict(_get_typed(config, "query", dict, {}, config_path)),
        depaginate=_get_typed(config, "depaginate", bool, False, config_path),
        glob_patterns=tuple(glob_patterns),
    )


def load_keys_config(keys_path: Optional[str] = None) -> KeysConfig:
    """Load the S3 keys configuration, using defaults when no file is given

    :param keys_path: (optional) Path to the keys file
    :returns: The keys configuration
    :raises: :class:`~cdsdl.utils.exceptions.MisconfiguredError`
    """
    if not keys_path:
        return KeysConfig()
    config = load_yml_config(keys_path)
    _check_keys(config, KEYS_CONFIG_KEYS, keys_path)
    for mandatory in ("accessKeyId", "secretAccessKey"):
        if mandatory not in config:
            raise MisconfiguredError(
                f"{mandatory!r} is missing in keys file {keys_path}"
            )

    return KeysConfig(
        endpoint_url=_get_typed(
            config, "endpointUrl", str, DEFAULT_S3_ENDPOINT, keys_path
        ),
        access_key_id=_get_typed(config, "accessKeyId", str, NOT_SET, keys_path),
        secret_access_key=_get_typed(
            config, "secretAccessKey", str, NOT_SET, keys_path
        ),
    )


def build_storage_config(
    keys: KeysConfig,
    glob_patterns: tuple[str, ...] = (),
    output_dir: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
) -> StorageConfig:
    """Resolve the storage configuration.

    Explicitly given values override the ones of the keys configuration. Glob
    patterns are compiled here, so that an invalid one aborts the run before any
    request is sent.

    :raises: :class:`~cdsdl.utils.exceptions.InvalidGlobPattern`
    """
    return StorageConfig(
        endpoint_url=endpoint_url or keys.endpoint_url,
        access_key_id=access_key_id or keys.access_key_id,
        secret_access_key=secret_access_key or keys.secret_access_key,
        output_dir=output_dir or ".",
        glob_patterns=compile_glob_patterns(glob_patterns),
    )
