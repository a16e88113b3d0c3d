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
"""Glob patterns used to select the objects of a product to download"""
from __future__ import annotations

import fnmatch
import re
from typing import TYPE_CHECKING

from cdsdl.utils.exceptions import InvalidGlobPattern

if TYPE_CHECKING:
    from typing import Iterable, Sequence


class GlobPattern:
    """A compiled shell-style pattern.

    Matching is case-sensitive and done on the whole key: ``*`` also matches
    ``/``, so that ``*.xml`` selects XML files at any depth of a product.
    """

    def __init__(self, pattern: str) -> None:
        _check_pattern(pattern)
        try:
            self._regex = re.compile(fnmatch.translate(pattern))
        except re.error as e:
            raise InvalidGlobPattern(pattern, str(e)) from e
        self.pattern = pattern

    def matches(self, key: str) -> bool:
        """Whether the whole ``key`` matches this pattern"""
        return self._regex.match(key) is not None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, GlobPattern) and other.pattern == self.pattern

    def __hash__(self) -> int:
        return hash(self.pattern)

    def __repr__(self) -> str:
        return f"GlobPattern({self.pattern!r})"


def _check_pattern(pattern: str) -> None:
    """Reject the patterns that :mod:`fnmatch` would silently take literally"""
    if not pattern:
        raise InvalidGlobPattern(pattern, "empty pattern")
    if "***" in pattern:
        raise InvalidGlobPattern(
            pattern, "wildcards are either regular `*` or recursive `**`"
        )
    start = pattern.find("**")
    while start != -1:
        end = start + 2
        if (start > 0 and pattern[start - 1] != "/") or (
            end < len(pattern) and pattern[end] != "/"
        ):
            raise InvalidGlobPattern(
                pattern, "recursive wildcards `**` must form a whole path component"
            )
        start = pattern.find("**", end)
    i, n = 0, len(pattern)
    while i < n:
        if pattern[i] == "[":
            j = i + 1
            if j < n and pattern[j] == "!":
                j += 1
            # a closing bracket right after the opening one is a literal
            if j < n and pattern[j] == "]":
                j += 1
            j = pattern.find("]", j)
            if j == -1:
                raise InvalidGlobPattern(pattern, "unclosed character class")
            i = j
        i += 1


def compile_glob_patterns(patterns: Iterable[str]) -> tuple[GlobPattern, ...]:
    """Compile configured glob patterns, keeping their order and dropping
    duplicates

    :param patterns: Shell-style patterns
    :returns: The compiled patterns
    :raises: :class:`~cdsdl.utils.exceptions.InvalidGlobPattern`
    """
    compiled: list[GlobPattern] = []
    for pattern in patterns:
        glob_pattern = GlobPattern(pattern)
        if glob_pattern not in compiled:
            compiled.append(glob_pattern)
    return tuple(compiled)


def matches_glob_patterns(patterns: Sequence[GlobPattern], key: str) -> bool:
    """Whether ``key`` is selected by the given patterns.

    An empty pattern set selects every key.

    >>> matches_glob_patterns(compile_glob_patterns(["*.xml"]), "/b/P/manifest.xml")
    True
    >>> matches_glob_patterns((), "/b/P/B01.jp2")
    True
    """
    if not patterns:
        return True
    return any(pattern.matches(key) for pattern in patterns)
