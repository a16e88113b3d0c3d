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
"""CDSDL package"""
from .api.core import download_all  # noqa
from .api.product import Product  # noqa
from .plugins.download.s3 import S3Download  # noqa
from .plugins.search.resto import RestoSearch  # noqa
from .utils import cdsdl_version as __version__  # noqa
from .utils.logging import setup_logging  # noqa
