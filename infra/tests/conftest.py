"""
Shared pytest fixtures for infrastructure tests.

Stacks are synthesized in-process with aws_cdk.assertions:

    def test_something(default_template):
        default_template.resource_count_is("AWS::EC2::NatGateway", 1)

Environment-agnostic stacks always resolve two AZs, so the multi-AZ
fixtures pin a concrete account/region and provide the AZ lookup through
context instead of calling AWS.
"""

import aws_cdk as cdk
import pytest
from aws_cdk.assertions import Template

from stacks.staging_stack import StagingStack
from stacks.validation import add_validation_aspects

TEST_ACCOUNT = "123456789012"
TEST_REGION = "us-east-2"
TEST_AZS = ["us-east-2a", "us-east-2b", "us-east-2c"]

AZ_CONTEXT_KEY = f"availability-zones:account={TEST_ACCOUNT}:region={TEST_REGION}"


def make_app(**context) -> cdk.App:
    """Create an App with availability zones pinned for the test environment."""
    return cdk.App(context={AZ_CONTEXT_KEY: TEST_AZS, **context})


def make_env() -> cdk.Environment:
    return cdk.Environment(account=TEST_ACCOUNT, region=TEST_REGION)


@pytest.fixture
def default_stack() -> StagingStack:
    """Staging stack with every option left at its default."""
    return StagingStack(make_app(), "TestStagingStack")


@pytest.fixture
def default_template(default_stack) -> Template:
    return Template.from_stack(default_stack)


@pytest.fixture
def custom_stack() -> StagingStack:
    """Staging stack spread over three AZs with non-default subnet masks."""
    return StagingStack(
        make_app(),
        "CustomStagingStack",
        env=make_env(),
        vpc_cidr="10.20.0.0/16",
        public_subnet_mask=20,
        private_subnet_mask=22,
        max_azs=3,
    )


@pytest.fixture
def custom_template(custom_stack) -> Template:
    return Template.from_stack(custom_stack)


@pytest.fixture
def validated_stack() -> StagingStack:
    """Staging stack with validation aspects registered before synthesis."""
    app = make_app()
    stack = StagingStack(app, "ValidatedStagingStack", env=make_env())
    add_validation_aspects(app)
    return stack
