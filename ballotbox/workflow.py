"""The election workflow: phase gating, voting and tallying."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from typing import Any

from ballotbox.errors import (
    AlreadyVoted,
    ElectionError,
    EmptyProposal,
    NotAVoter,
    NotOwner,
    WrongPhase,
)
from ballotbox.events import EventFeed, EventLog, LogEntry
from ballotbox.models import (
    Event,
    OwnershipTransferred,
    Participant,
    Proposal,
    Voted,
    WorkflowStatus,
    WorkflowStatusChange,
)
from ballotbox.registry import Registry
from ballotbox.tally import TallyResult, tally

logger = logging.getLogger(__name__)

GENESIS_DESCRIPTION = "GENESIS"

# Phase each gated operation requires, and the message used to reject it
_REQUIRED_PHASE: dict[str, tuple[WorkflowStatus, str]] = {
    "register_participant": (
        WorkflowStatus.REGISTERING_VOTERS,
        "Voters registration is not open yet",
    ),
    "start_proposals_registering": (
        WorkflowStatus.REGISTERING_VOTERS,
        "Registering proposals can't be started now",
    ),
    "submit_proposal": (
        WorkflowStatus.PROPOSALS_REGISTRATION_STARTED,
        "Proposals are not allowed yet",
    ),
    "end_proposals_registering": (
        WorkflowStatus.PROPOSALS_REGISTRATION_STARTED,
        "Registering proposals hasn't started yet",
    ),
    "start_voting_session": (
        WorkflowStatus.PROPOSALS_REGISTRATION_ENDED,
        "Registering proposals phase is not finished",
    ),
    "cast_vote": (
        WorkflowStatus.VOTING_SESSION_STARTED,
        "Voting session hasn't started yet",
    ),
    "end_voting_session": (
        WorkflowStatus.VOTING_SESSION_STARTED,
        "Voting session hasn't started yet",
    ),
    "tally_votes": (
        WorkflowStatus.VOTING_SESSION_ENDED,
        "Current status is not voting session ended",
    ),
    "results": (
        WorkflowStatus.VOTES_TALLIED,
        "Votes have not been tallied yet",
    ),
}


class Election:
    """A single election, driven through its phases by an administrator.

    Every operation takes the caller's identity explicitly and checks it
    first. Mutating operations run their checks, their mutation and the
    logging of their notifications under one lock, so they never
    interleave; reads take the same lock and return copies.

    Phases only move forward:

        RegisteringVoters -> ProposalsRegistrationStarted
        -> ProposalsRegistrationEnded -> VotingSessionStarted
        -> VotingSessionEnded -> VotesTallied

    Args:
        admin: Identity of the administrator
        seed_genesis: Whether opening proposal registration inserts a
            placeholder proposal at id 0
        genesis_description: Description of that placeholder

    Example:
        >>> election = Election(admin="0xadmin")
        >>> election.register_participant("0xadmin", "0xalice")
        >>> election.start_proposals_registering("0xadmin")
        >>> election.submit_proposal("0xalice", "Build a bridge")
        0
    """

    def __init__(
        self,
        admin: str,
        *,
        seed_genesis: bool = False,
        genesis_description: str = GENESIS_DESCRIPTION,
    ):
        if not admin:
            raise ValueError("An election needs an administrator")
        if seed_genesis and not genesis_description.strip():
            raise ValueError("The genesis proposal needs a description")

        self._admin = admin
        self._seed_genesis = seed_genesis
        self._genesis_description = genesis_description
        self._status = WorkflowStatus.REGISTERING_VOTERS
        self._result: TallyResult | None = None

        self._lock = threading.Lock()
        self._context: tuple[str, str] = ("", "")
        self._pending: list[LogEntry] = []

        self._log = EventLog()
        self.events = EventFeed(self._log)
        self._registry = Registry(notify=self._emit)

    # --- Read-only state ---

    @property
    def admin(self) -> str:
        with self._lock:
            return self._admin

    @property
    def workflow_status(self) -> WorkflowStatus:
        with self._lock:
            return self._status

    def get_winning_proposal_id(self) -> int | None:
        """Id of the winning proposal; None until votes are tallied."""
        with self._lock:
            return self._result.winning_proposal_id if self._result else None

    def get_participant(self, caller: str, identity: str) -> Participant:
        with self._lock:
            self._require_voter(caller)
            return self._registry.get_participant(identity)

    def get_proposal(self, caller: str, proposal_id: int) -> Proposal:
        with self._lock:
            self._require_voter(caller)
            return self._registry.get_proposal(proposal_id)

    def get_proposals(self, caller: str) -> list[Proposal]:
        with self._lock:
            self._require_voter(caller)
            return self._registry.proposals()

    def results(self) -> TallyResult:
        """A copy of the published tally; only available once votes are tallied."""
        with self._lock:
            self._require_phase("results")
            return replace(
                self._result,
                vote_counts=dict(self._result.vote_counts),
                tied=list(self._result.tied),
                details=dict(self._result.details),
            )

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "admin": self._admin,
                "workflow_status": int(self._status),
                "workflow_status_label": self._status.label,
                "participants": self._registry.participant_count,
                "proposals": self._registry.proposal_count,
                "voter_turnout": self._registry.voter_turnout,
                "winning_proposal_id": (
                    self._result.winning_proposal_id if self._result else None
                ),
            }

    # --- Registration ---

    def register_participant(self, caller: str, identity: str) -> None:
        with self._operation("register_participant", caller):
            self._require_owner(caller)
            self._require_phase("register_participant")
            if not identity:
                raise ValueError("Participant identity must not be empty")
            self._registry.register_participant(identity)

    def submit_proposal(self, caller: str, description: str) -> int:
        """Submit a proposal and return its id.

        An empty description is rejected before the phase is checked, so
        it fails with EmptyProposal in every phase.
        """
        with self._operation("submit_proposal", caller):
            self._require_voter(caller)
            if not description or not description.strip():
                raise EmptyProposal()
            self._require_phase("submit_proposal")
            return self._registry.submit_proposal(description)

    # --- Voting ---

    def cast_vote(self, caller: str, proposal_id: int) -> None:
        with self._operation("cast_vote", caller):
            self._require_voter(caller)
            self._require_phase("cast_vote")
            if self._registry.get_participant(caller).has_voted:
                raise AlreadyVoted(caller)
            self._registry.record_vote(caller, proposal_id)
            self._emit(Voted(voter=caller, proposal_id=proposal_id))

    # --- Phase transitions ---

    def start_proposals_registering(self, caller: str) -> None:
        with self._operation("start_proposals_registering", caller):
            self._require_owner(caller)
            self._require_phase("start_proposals_registering")
            if self._seed_genesis:
                self._registry.submit_proposal(self._genesis_description)
            self._advance()

    def end_proposals_registering(self, caller: str) -> None:
        with self._operation("end_proposals_registering", caller):
            self._require_owner(caller)
            self._require_phase("end_proposals_registering")
            self._advance()

    def start_voting_session(self, caller: str) -> None:
        with self._operation("start_voting_session", caller):
            self._require_owner(caller)
            self._require_phase("start_voting_session")
            self._advance()

    def end_voting_session(self, caller: str) -> None:
        with self._operation("end_voting_session", caller):
            self._require_owner(caller)
            self._require_phase("end_voting_session")
            self._advance()

    def tally_votes(self, caller: str) -> int | None:
        """Count the votes, close the election and return the winner's id."""
        with self._operation("tally_votes", caller):
            self._require_owner(caller)
            self._require_phase("tally_votes")
            self._result = tally(self._registry.proposals())
            self._advance()
            logger.info(
                "Votes tallied: winner %s with %d of %d votes",
                self._result.winning_proposal_id,
                self._result.details.get("winning_vote_count", 0),
                self._result.total_votes,
            )
            return self._result.winning_proposal_id

    def transfer_ownership(self, caller: str, new_admin: str) -> None:
        with self._operation("transfer_ownership", caller):
            self._require_owner(caller)
            if not new_admin:
                raise ValueError("New administrator must not be empty")
            previous, self._admin = self._admin, new_admin
            self._emit(OwnershipTransferred(previous_owner=previous, new_owner=new_admin))
            logger.info("Ownership transferred from %s to %s", previous, new_admin)

    # --- Internals ---

    @contextmanager
    def _operation(self, name: str, caller: str) -> Iterator[None]:
        """Run a mutating operation under the lock, then notify subscribers."""
        with self._lock:
            self._context = (name, caller)
            self._pending = []
            try:
                yield
            except ElectionError as e:
                logger.debug("%s by %s rejected: %s", name, caller, e.code)
                raise
            finally:
                pending, self._pending = self._pending, []
        self._log.publish(pending)

    def _emit(self, event: Event) -> None:
        operation, caller = self._context
        self._pending.append(self._log.append(event, operation, caller))

    def _advance(self) -> None:
        previous, self._status = self._status, self._status.next()
        self._emit(WorkflowStatusChange(previous_status=previous, new_status=self._status))
        logger.info("Workflow status changed: %s -> %s", previous.label, self._status.label)

    def _require_owner(self, caller: str) -> None:
        if caller != self._admin:
            raise NotOwner(caller)

    def _require_voter(self, caller: str) -> None:
        if not self._registry.is_registered(caller):
            raise NotAVoter(caller)

    def _require_phase(self, operation: str) -> None:
        expected, message = _REQUIRED_PHASE[operation]
        if self._status is not expected:
            raise WrongPhase(message, expected=expected, actual=self._status)
