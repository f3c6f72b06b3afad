from bitbucket_enforcer.testing.conftest import (  # noqa: F401
    mock_client,
    policy_dir,
    policy_loader,
    repo_ref,
)
