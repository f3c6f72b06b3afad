#!/usr/bin/env python3
"""
Basic Bitbucket Enforcer usage example.

Runs one enforcement cycle against the in-memory mock client, using the
sample policy in ``configs/``, so nothing touches a real account.
Run with: python examples/python/basic_usage.py
"""

from pathlib import Path

from bitbucket_enforcer import Enforcer, PolicyLoader, Reconciler, inspect
from bitbucket_enforcer.testing import MockBitbucketClient

CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"

print("=== Bitbucket Enforcer Basic Usage Example ===\n")

# 1. The gate reads opt-outs and selectors from descriptions
print("1. Inspecting descriptions...")
for description in ["", "Widgets -noenforce", "-enforce=default", "Done\n\n-enforced"]:
    decision = inspect(description)
    print(f"   {description!r:30} -> skip={decision.skip} policy={decision.policy_name!r}")

# 2. One cycle against the mock
print("\n2. Running one cycle...")
client = MockBitbucketClient(username="acme")
client.add_repository("acme/widgets", description="Widgets")
client.add_repository("acme/legacy", description="Legacy -noenforce")

enforcer = Enforcer(client, "acme", Reconciler(client, PolicyLoader(CONFIG_DIR)))
report = enforcer.run_once()

for full_name, outcome in report.outcomes.items():
    print(f"   {full_name}: {outcome.value}")

print("\n3. Calls that changed remote state:")
for call in client.mutating_calls():
    print(f"   {call.method}")

print(f"\n   acme/widgets description is now {client.repositories['acme/widgets'].description!r}")
