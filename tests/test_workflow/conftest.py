"""Shared fixtures for election workflow tests."""

import pytest
from tests.conftest import VOTER_ONE, VOTER_TWO, make_election

from ballotbox.models import WorkflowStatus

FOUR_PROPOSALS = [
    (VOTER_ONE, "Everyone rich"),
    (VOTER_ONE, "Everyone free"),
    (VOTER_TWO, "Everyone equal"),
    (VOTER_TWO, "Everyone smart"),
]


@pytest.fixture
def registering():
    """Voter registration open; VOTER_ONE registered."""
    return make_election([VOTER_ONE])


@pytest.fixture
def proposing():
    """Proposal registration open; both voters registered, no proposals yet."""
    return make_election(
        [VOTER_ONE, VOTER_TWO],
        phase=WorkflowStatus.PROPOSALS_REGISTRATION_STARTED,
    )


@pytest.fixture
def voting():
    """Voting open on four proposals (ids 0-3); nobody has voted."""
    return make_election(
        [VOTER_ONE, VOTER_TWO],
        proposals=FOUR_PROPOSALS,
        phase=WorkflowStatus.VOTING_SESSION_STARTED,
    )


@pytest.fixture
def voting_ended():
    """Voting closed; both voters chose proposal 1."""
    return make_election(
        [VOTER_ONE, VOTER_TWO],
        proposals=FOUR_PROPOSALS,
        votes={VOTER_ONE: 1, VOTER_TWO: 1},
        phase=WorkflowStatus.VOTING_SESSION_ENDED,
    )
