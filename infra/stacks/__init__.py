"""CDK Stacks for LizDMS infrastructure."""

from .config import StagingConfig
from .staging_stack import StagingStack

__all__ = [
    "StagingConfig",
    "StagingStack",
]
