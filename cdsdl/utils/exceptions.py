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

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Optional


class CdsdlError(Exception):
    """General CDSDL error"""


class MisconfiguredError(CdsdlError):
    """An error indicating that a configuration value or a top-level input is not
    usable"""


class InvalidGlobPattern(MisconfiguredError):
    """An error indicating that a glob pattern of the configuration cannot be
    compiled"""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Couldn't build glob pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class MalformedKey(CdsdlError):
    """An error indicating that a product or object key isn't structured as
    ``/<bucket>/<path>``"""

    def __init__(self, key: str, reason: Optional[str] = None) -> None:
        message = f"Key isn't properly structured: {key!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.key = key


class NotRelative(CdsdlError):
    """An error indicating that a key does not start with the prefix it should be
    relative to"""

    def __init__(self, key: str, relative_to: str) -> None:
        super().__init__(f"Key {key!r} is not relative to {relative_to!r}")
        self.key = key
        self.relative_to = relative_to


class SearchRequestFailed(CdsdlError):
    """An error indicating that a request to the search endpoint has failed
    (network error, timeout or HTTP error status)"""


class SearchResponseMalformed(CdsdlError):
    """An error indicating that the search endpoint answered with something that
    is not the expected feature collection"""


class ListFailed(CdsdlError):
    """An error indicating that listing the objects under a product prefix has
    failed"""


class GetObjectFailed(CdsdlError):
    """An error indicating that fetching a remote object has failed"""


class LocalIOFailed(CdsdlError):
    """An error indicating that a local directory or file could not be created or
    written"""
