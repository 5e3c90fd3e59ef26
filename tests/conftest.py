"""Shared test helpers."""

from ballotbox.models import WorkflowStatus
from ballotbox.workflow import Election

ADMIN = "0xowner"
VOTER_ONE = "0xvoter1"
VOTER_TWO = "0xvoter2"
NON_VOTER = "0xstranger"

# Admin operation that moves an election into each phase, in order
_ADVANCE = [
    (WorkflowStatus.PROPOSALS_REGISTRATION_STARTED, "start_proposals_registering"),
    (WorkflowStatus.PROPOSALS_REGISTRATION_ENDED, "end_proposals_registering"),
    (WorkflowStatus.VOTING_SESSION_STARTED, "start_voting_session"),
    (WorkflowStatus.VOTING_SESSION_ENDED, "end_voting_session"),
    (WorkflowStatus.VOTES_TALLIED, "tally_votes"),
]


def advance_to(election: Election, phase: WorkflowStatus, admin: str = ADMIN) -> None:
    """Run the admin transitions needed to reach `phase`."""
    for target, operation in _ADVANCE:
        if election.workflow_status >= phase:
            return
        if election.workflow_status < target:
            getattr(election, operation)(admin)


def make_election(
    voters: list[str],
    proposals: list[tuple[str, str]] | None = None,
    votes: dict[str, int] | None = None,
    phase: WorkflowStatus = WorkflowStatus.REGISTERING_VOTERS,
    **kwargs,
) -> Election:
    """Build an election and drive it to the given phase.

    Args:
        voters: Identities to register
        proposals: (submitter, description) pairs, submitted in order;
            needs phase >= ProposalsRegistrationStarted
        votes: {voter: proposal_id}, cast in order; needs
            phase >= VotingSessionStarted
        phase: Phase the election should end up in
        **kwargs: Passed to Election (e.g. seed_genesis)
    """
    election = Election(ADMIN, **kwargs)
    for voter in voters:
        election.register_participant(ADMIN, voter)

    if phase >= WorkflowStatus.PROPOSALS_REGISTRATION_STARTED:
        advance_to(election, WorkflowStatus.PROPOSALS_REGISTRATION_STARTED)
        for submitter, description in proposals or []:
            election.submit_proposal(submitter, description)

    if phase >= WorkflowStatus.VOTING_SESSION_STARTED:
        advance_to(election, WorkflowStatus.VOTING_SESSION_STARTED)
        for voter, proposal_id in (votes or {}).items():
            election.cast_vote(voter, proposal_id)

    advance_to(election, phase)
    return election


def event_names(election: Election) -> list[str]:
    return [entry.event.name for entry in election.events]
