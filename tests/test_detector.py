"""
Tests for roster change detection.

Feature: bitbucket-enforcer
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from bitbucket_enforcer.detector import ChangeDetector, PollResult
from bitbucket_enforcer.exceptions import ServerError
from bitbucket_enforcer.testing import MockBitbucketClient

token_strategy = st.sampled_from(["etag-a", "etag-b", "etag-c"])


class TestChangeDetector:
    """Tests for ChangeDetector.poll."""

    def test_first_poll_is_a_change(self) -> None:
        client = MockBitbucketClient(etag="etag-1")

        result = ChangeDetector(client).poll("mock-user", None)

        assert result == PollResult(changed=True, token="etag-1")

    def test_same_token_is_unchanged(self) -> None:
        client = MockBitbucketClient(etag="etag-1")
        detector = ChangeDetector(client)

        first = detector.poll("mock-user", None)
        second = detector.poll("mock-user", first.token)

        assert second == PollResult(changed=False, token="etag-1")

    def test_new_token_is_a_change(self) -> None:
        client = MockBitbucketClient(etag="etag-2")

        result = ChangeDetector(client).poll("mock-user", "etag-1")

        assert result.changed
        assert result.token == "etag-2"

    def test_error_keeps_previous_token(self) -> None:
        client = MockBitbucketClient(etag="etag-2")
        client.configure_error("repos.revision", ServerError("CONNECTION_ERROR", "down"))

        result = ChangeDetector(client).poll("mock-user", "etag-1")

        assert result == PollResult(changed=False, token="etag-1")

    def test_recovers_after_error(self) -> None:
        client = MockBitbucketClient(etag="etag-2")
        client.configure_error("repos.revision", ServerError("HTTP_503", "busy", 503), times=1)
        detector = ChangeDetector(client)

        failed = detector.poll("mock-user", "etag-1")
        recovered = detector.poll("mock-user", failed.token)

        assert not failed.changed
        assert recovered == PollResult(changed=True, token="etag-2")

    def test_polls_the_given_owner(self) -> None:
        client = MockBitbucketClient()

        ChangeDetector(client).poll("acme", None)

        assert client.get_calls("repos.revision")[0].args == ("acme",)


@given(tokens=st.lists(token_strategy, min_size=1, max_size=20))
@settings(max_examples=100)
def test_one_change_per_token_transition(tokens: list[str]) -> None:
    """
    For any sequence of observed tokens, a change is reported exactly once
    per transition to a different token (the first observation counts).
    """
    client = MockBitbucketClient()
    detector = ChangeDetector(client)

    last: str | None = None
    changes = 0
    for token in tokens:
        client.etag = token
        result = detector.poll("mock-user", last)
        last = result.token
        changes += result.changed

    transitions = 1 + sum(1 for a, b in zip(tokens, tokens[1:]) if a != b)
    assert changes == transitions
