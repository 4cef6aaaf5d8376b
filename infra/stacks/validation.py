"""
CDK validation aspects for pre-deployment checks.

These aspects run during `cdk synth` and will add warnings/info
for validation rules, catching issues before deployment.
Warnings fail `cdk synth --strict`.

Usage:
    from stacks.validation import add_validation_aspects
    add_validation_aspects(app)
"""

import aws_cdk as cdk
import jsii
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_ecs as ecs
from aws_cdk import aws_iam as iam
from aws_cdk import aws_s3 as s3
from constructs import IConstruct

WILDCARD_RESOURCE_WARNING_ID = "lizdms:wildcard-resource-policy"

# Actions that IAM only accepts on Resource "*"
RESOURCE_UNSCOPABLE_ACTIONS = frozenset(
    {
        "ecr:GetAuthorizationToken",
    }
)


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def wildcard_actions(document: iam.PolicyDocument) -> list[str]:
    """
    Return actions granted on the `*` resource by Allow statements in a policy document.

    Actions that cannot be scoped to an ARN are skipped.
    """
    rendered = document.to_json() or {}
    actions: list[str] = []
    for statement in _as_list(rendered.get("Statement")):
        if statement.get("Effect") != "Allow":
            continue
        if "*" in _as_list(statement.get("Resource")):
            actions.extend(
                action
                for action in _as_list(statement.get("Action"))
                if action not in RESOURCE_UNSCOPABLE_ACTIONS
            )
    return actions


@jsii.implements(cdk.IAspect)
class StagingReadinessAspect:
    """
    Flags staging-only sizing decisions that need revisiting before production.

    Checks:
    - ECS services run a single task (no HA)
    - A single NAT gateway serves every private subnet
    """

    def visit(self, node: IConstruct) -> None:
        if isinstance(node, ecs.FargateService):
            cdk.Annotations.of(node).add_info(
                "Staging runs a single task; raise desired_count and add auto-scaling for production"
            )

        if isinstance(node, ec2.CfnNatGateway):
            cdk.Annotations.of(node).add_info(
                "Single NAT gateway shared by all private subnets; an AZ outage cuts egress"
            )


@jsii.implements(cdk.IAspect)
class SecurityAspect:
    """
    Validates security requirements for deployed resources.

    Checks:
    - S3 buckets block public access
    - IAM policies do not grant actions on all resources
    """

    def visit(self, node: IConstruct) -> None:
        if isinstance(node, s3.Bucket):
            cdk.Annotations.of(node).add_info("Ensure S3 bucket has block_public_access configured")

        if isinstance(node, iam.Policy):
            actions = wildcard_actions(node.document)
            if actions:
                cdk.Annotations.of(node).add_warning_v2(
                    WILDCARD_RESOURCE_WARNING_ID,
                    f"Policy grants {', '.join(actions)} on wildcard resource '*'; "
                    "scope to specific resource ARNs",
                )


def add_validation_aspects(
    scope: cdk.App,
    enable_readiness_checks: bool = True,
    enable_security_checks: bool = True,
) -> None:
    """
    Add validation aspects to all stacks in the CDK app.

    Args:
        scope: The CDK App (or Stack) to add aspects to
        enable_readiness_checks: Whether to flag staging-only sizing decisions
        enable_security_checks: Whether to run security-related validations
    """
    if enable_readiness_checks:
        cdk.Aspects.of(scope).add(StagingReadinessAspect())

    if enable_security_checks:
        cdk.Aspects.of(scope).add(SecurityAspect())
