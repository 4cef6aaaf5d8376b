"""
Staging configuration resolved from CDK context.

All options are optional and may be overridden at synth time:

    cdk synth -c vpc_cidr=10.1.0.0/16 -c max_azs=3 -c region=us-west-2

Values passed with -c arrive as strings, so integer options are coerced.
"""

import logging
import os
from dataclasses import asdict, dataclass
from typing import Any

import aws_cdk as cdk
from constructs import Construct

logger = logging.getLogger(__name__)

DEFAULT_VPC_CIDR = "10.0.0.0/16"
DEFAULT_PUBLIC_SUBNET_MASK = 24
DEFAULT_PRIVATE_SUBNET_MASK = 24
DEFAULT_MAX_AZS = 2
DEFAULT_REGION = "us-east-2"


def _int_context(scope: Construct, key: str, default: int) -> int:
    value = scope.node.try_get_context(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Context value '{key}' must be an integer, got {value!r}") from e


@dataclass
class StagingConfig:
    """Network and environment settings for the staging stack."""

    vpc_cidr: str = DEFAULT_VPC_CIDR
    public_subnet_mask: int = DEFAULT_PUBLIC_SUBNET_MASK
    private_subnet_mask: int = DEFAULT_PRIVATE_SUBNET_MASK
    max_azs: int = DEFAULT_MAX_AZS
    account: str | None = None
    region: str = DEFAULT_REGION

    @classmethod
    def from_context(cls, scope: Construct) -> "StagingConfig":
        """
        Build config from CDK context, falling back to defaults.

        The account falls back to CDK_DEFAULT_ACCOUNT, which the CDK CLI
        sets from the active credentials.
        """
        config = cls(
            vpc_cidr=scope.node.try_get_context("vpc_cidr") or DEFAULT_VPC_CIDR,
            public_subnet_mask=_int_context(
                scope, "public_subnet_mask", DEFAULT_PUBLIC_SUBNET_MASK
            ),
            private_subnet_mask=_int_context(
                scope, "private_subnet_mask", DEFAULT_PRIVATE_SUBNET_MASK
            ),
            max_azs=_int_context(scope, "max_azs", DEFAULT_MAX_AZS),
            account=scope.node.try_get_context("account") or os.environ.get("CDK_DEFAULT_ACCOUNT"),
            region=scope.node.try_get_context("region") or DEFAULT_REGION,
        )
        logger.info("Resolved staging config: %s", config)
        return config

    def environment(self) -> cdk.Environment:
        return cdk.Environment(account=self.account, region=self.region)

    def stack_options(self) -> dict[str, Any]:
        """Keyword arguments for StagingStack (network settings only)."""
        options = asdict(self)
        options.pop("account")
        options.pop("region")
        return options
