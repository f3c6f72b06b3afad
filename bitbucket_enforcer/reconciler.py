"""
Per-repository reconciliation.

A policy is applied one facet at a time in a fixed order. Every facet
compares the declared state against the remote first and only writes what
differs, so enforcing a conforming repository issues read calls only.

The first facet that fails aborts the rest. Nothing is rolled back: the
remaining facets are completed by a later enforcement.
"""

from typing import TYPE_CHECKING

from bitbucket_enforcer.exceptions import ConflictError
from bitbucket_enforcer.keys import reconcile_deploy_keys
from bitbucket_enforcer.logging import get_logger
from bitbucket_enforcer.types.policy import Permission, Policy
from bitbucket_enforcer.types.repos import (
    BranchRestriction,
    RepositoryRef,
    RepositorySettings,
)

if TYPE_CHECKING:
    from bitbucket_enforcer.client import BitbucketClient
    from bitbucket_enforcer.policy import PolicyLoader

logger = get_logger("reconcile")

WEBHOOK_TYPE = "POST"
WEBHOOK_URL_FIELD = "URL"


class Reconciler:
    """Moves a repository toward a named policy."""

    def __init__(self, client: "BitbucketClient", loader: "PolicyLoader") -> None:
        """
        Args:
            client: Authenticated Bitbucket client
            loader: Source of policy documents
        """
        self.client = client
        self.loader = loader

    def enforce(self, ref: RepositoryRef, policy_name: str) -> None:
        """
        Load ``policy_name`` and apply it to ``ref``.

        Raises:
            PolicyError: If the policy cannot be loaded; the repository is
                left untouched
            EnforcerError: From the first facet that fails
        """
        policy = self.loader.load(policy_name)
        logger.info("Enforcing policy %r on %s", policy_name, ref)
        self.apply(ref, policy)

    def apply(self, ref: RepositoryRef, policy: Policy) -> None:
        """Apply every facet of ``policy`` to ``ref`` in order."""
        current = self._current_settings(ref, policy)

        self.ensure_privacy(ref, policy, current)
        self.ensure_forks(ref, policy, current)
        self.ensure_landing_page(ref, policy, current)
        self.ensure_deploy_keys(ref, policy)
        self.ensure_webhooks(ref, policy)
        self.ensure_issue_tracker(ref, policy, current)
        self.ensure_main_branch(ref, policy, current)
        self.ensure_branch_restrictions(ref, policy)
        self.ensure_access(ref, policy)

    def _current_settings(self, ref: RepositoryRef, policy: Policy) -> RepositorySettings:
        scalar_facets = (
            policy.private is not None,
            policy.forks,
            policy.landing_page,
            policy.issue_tracker,
            policy.main_branch,
        )
        if not any(scalar_facets):
            return RepositorySettings()
        return self.client.repos.get_settings(ref)

    def ensure_privacy(
        self, ref: RepositoryRef, policy: Policy, current: RepositorySettings
    ) -> None:
        if policy.private is None or current.is_private == policy.private:
            return
        logger.info("%s: setting private=%s", ref, policy.private)
        self.client.repos.set_privacy(ref, policy.private)

    def ensure_forks(
        self, ref: RepositoryRef, policy: Policy, current: RepositorySettings
    ) -> None:
        if not policy.forks or current.forks == policy.forks:
            return
        logger.info("%s: setting fork policy %r", ref, policy.forks)
        self.client.repos.set_forks(ref, policy.forks)

    def ensure_landing_page(
        self, ref: RepositoryRef, policy: Policy, current: RepositorySettings
    ) -> None:
        if not policy.landing_page or current.landing_page == policy.landing_page:
            return
        logger.info("%s: setting landing page %r", ref, policy.landing_page)
        self.client.repos.set_landing_page(ref, policy.landing_page)

    def ensure_deploy_keys(self, ref: RepositoryRef, policy: Policy) -> None:
        if not policy.deploy_keys:
            return
        reconcile_deploy_keys(self.client, ref, policy.deploy_keys)

    def ensure_webhooks(self, ref: RepositoryRef, policy: Policy) -> None:
        """Add missing POST hooks. Hooks the policy does not name are kept."""
        if not policy.post_hooks:
            return

        existing = {
            service.fields.get(WEBHOOK_URL_FIELD)
            for service in self.client.services.list(ref)
            if service.type == WEBHOOK_TYPE
        }
        for url in policy.post_hooks:
            if url in existing:
                continue
            logger.info("%s: adding POST hook %s", ref, url)
            self.client.services.add(ref, WEBHOOK_TYPE, {WEBHOOK_URL_FIELD: url})
            existing.add(url)

    def ensure_issue_tracker(
        self, ref: RepositoryRef, policy: Policy, current: RepositorySettings
    ) -> None:
        if not policy.issue_tracker or current.issue_tracker == policy.issue_tracker:
            return
        logger.info("%s: setting issue tracker %r", ref, policy.issue_tracker)
        self.client.repos.set_issue_tracker(ref, policy.issue_tracker)

    def ensure_main_branch(
        self, ref: RepositoryRef, policy: Policy, current: RepositorySettings
    ) -> None:
        if not policy.main_branch or current.main_branch == policy.main_branch:
            return
        logger.info("%s: setting main branch %r", ref, policy.main_branch)
        self.client.repos.set_main_branch(ref, policy.main_branch)

    def ensure_branch_restrictions(self, ref: RepositoryRef, policy: Policy) -> None:
        """
        Ensure delete, force-push and push restrictions exist.

        A restriction the remote reports as already existing counts as
        applied.
        """
        wanted = desired_restrictions(policy)
        if not wanted:
            return

        existing = self.client.restrictions.list(ref)
        for rule in wanted:
            if any(rule.same_rule(other) for other in existing):
                continue
            logger.info("%s: adding %s restriction on %r", ref, rule.kind, rule.pattern)
            try:
                self.client.restrictions.add(
                    ref, rule.kind, rule.pattern, users=rule.users, groups=rule.groups
                )
            except ConflictError:
                logger.debug("%s: %s restriction on %r already exists", ref, rule.kind, rule.pattern)
            existing.append(rule)

    def ensure_access(self, ref: RepositoryRef, policy: Policy) -> None:
        """
        Ensure user grants, then group grants.

        Every permission level is validated before the first request.
        """
        access = policy.access_management
        users = {name: Permission.parse(level) for name, level in access.users.items()}
        groups = {name: Permission.parse(level) for name, level in access.groups.items()}

        if users:
            granted = {p.name: p.permission for p in self.client.privileges.list_users(ref)}
            for username, level in users.items():
                if granted.get(username) == level.value:
                    continue
                logger.info("%s: granting %s to user %s", ref, level.value, username)
                self.client.privileges.grant_user(ref, username, level.value)

        if groups:
            granted = {p.name: p.permission for p in self.client.privileges.list_groups(ref)}
            for group, level in groups.items():
                if granted.get(group) == level.value:
                    continue
                logger.info("%s: granting %s to group %s", ref, level.value, group)
                self.client.privileges.grant_group(ref, group, level.value)


def desired_restrictions(policy: Policy) -> list[BranchRestriction]:
    """Branch restrictions declared by a policy, in application order."""
    branches = policy.branch_management
    rules = [BranchRestriction(kind="delete", pattern=p) for p in branches.prevent_delete]
    rules += [BranchRestriction(kind="force", pattern=p) for p in branches.prevent_rebase]
    rules += [
        BranchRestriction(kind="push", pattern=pattern, users=rule.users, groups=rule.groups)
        for pattern, rule in branches.allow_pushes.items()
    ]
    return rules
