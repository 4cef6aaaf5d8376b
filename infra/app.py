#!/usr/bin/env python3
"""
AWS CDK app entry point for LizDMS staging infrastructure.
"""

import logging

import aws_cdk as cdk

from stacks.config import StagingConfig
from stacks.staging_stack import StagingStack
from stacks.validation import add_validation_aspects

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("lizdms.infra")

app = cdk.App()

config = StagingConfig.from_context(app)

staging = StagingStack(
    app,
    "LizDmsStagingStack",
    env=config.environment(),
    **config.stack_options(),
)

cdk.Tags.of(staging).add("Project", "LizDMS")
cdk.Tags.of(staging).add("Environment", "staging")

add_validation_aspects(app)

logger.info("Synthesizing %s (region=%s)", staging.stack_name, config.region)
app.synth()
