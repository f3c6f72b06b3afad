"""Bitbucket Enforcer type definitions.

This module exports all data model types used by the enforcer.
"""

from bitbucket_enforcer.types.policy import (
    AccessManagement,
    BranchManagement,
    DeployKeySpec,
    Permission,
    Policy,
    PushRule,
)
from bitbucket_enforcer.types.repos import (
    BranchRestriction,
    Privilege,
    RemoteDeployKey,
    Repository,
    RepositoryRef,
    RepositorySettings,
    Service,
)

__all__ = [
    # Policy types
    "Policy",
    "DeployKeySpec",
    "BranchManagement",
    "PushRule",
    "AccessManagement",
    "Permission",
    # Repository types
    "Repository",
    "RepositoryRef",
    "RepositorySettings",
    "RemoteDeployKey",
    "Service",
    "BranchRestriction",
    "Privilege",
]
