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
from typing import TYPE_CHECKING, cast

import boto3
from botocore.config import Config

from cdsdl.utils import APP_NAME, DEFAULT_S3_REGION, NOT_SET, cdsdl_version
from cdsdl.utils.exceptions import MisconfiguredError

if TYPE_CHECKING:
    from botocore.exceptions import ClientError
    from mypy_boto3_s3.client import S3Client

    from cdsdl.config import StorageConfig


logger = logging.getLogger("cdsdl.download.aws_auth")

AWS_AUTH_ERROR_MESSAGES = [
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "InvalidRequest",
]


def is_auth_error(exception: ClientError) -> bool:
    """Whether given exception is an authentication error"""
    err = cast(dict[str, str], exception.response.get("Error", {}))
    return err.get("Code") in AWS_AUTH_ERROR_MESSAGES


def create_s3_client(config: StorageConfig) -> S3Client:
    """Create the S3 client used to list and download products objects

    The client uses path-style addressing on the configured endpoint and the static
    credentials of the configuration. It is ready to use and can be shared between
    threads.

    :param config: Storage configuration
    :returns: boto3 S3 client
    :raises: :class:`~cdsdl.utils.exceptions.MisconfiguredError`
    """
    if not config.endpoint_url:
        raise MisconfiguredError("An S3 endpoint URL is needed to download products")
    if NOT_SET in (config.access_key_id, config.secret_access_key):
        logger.warning(
            "S3 credentials are not set, requests to %s will probably be rejected",
            config.endpoint_url,
        )
    session = boto3.Session(
        aws_access_key_id=config.access_key_id,
        aws_secret_access_key=config.secret_access_key,
        region_name=DEFAULT_S3_REGION,
    )
    logger.debug("Creating S3 client on %s", config.endpoint_url)
    return session.client(
        service_name="s3",
        endpoint_url=config.endpoint_url,
        config=Config(
            s3={"addressing_style": "path"},
            user_agent_extra=f"{APP_NAME}/{cdsdl_version}",
        ),
    )
