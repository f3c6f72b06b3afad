"""Bitbucket Enforcer resource clients."""

from bitbucket_enforcer.clients.deploy_keys import DeployKeysClient
from bitbucket_enforcer.clients.privileges import PrivilegesClient
from bitbucket_enforcer.clients.repos import ReposClient
from bitbucket_enforcer.clients.restrictions import RestrictionsClient
from bitbucket_enforcer.clients.services import ServicesClient

__all__ = [
    "ReposClient",
    "DeployKeysClient",
    "ServicesClient",
    "RestrictionsClient",
    "PrivilegesClient",
]
