"""Storage for participants and proposals."""

import logging
from collections.abc import Callable
from dataclasses import replace

from ballotbox.errors import (
    AlreadyRegistered,
    AlreadyVoted,
    EmptyProposal,
    NotAVoter,
    ProposalNotFound,
)
from ballotbox.models import Event, Participant, Proposal, ProposalRegistered, VoterRegistered

logger = logging.getLogger(__name__)


class Registry:
    """Authoritative collections of participants and proposals.

    The registry knows nothing about workflow phases; the election checks
    the phase before delegating here. It does enforce entity-level rules:
    no double registration, no empty proposal, no vote for an unknown
    proposal, and no second vote from the same participant.

    Lookups return copies, so callers cannot mutate stored records.

    Args:
        notify: Called with each notification the registry emits.
    """

    def __init__(self, notify: Callable[[Event], None] | None = None):
        self._participants: dict[str, Participant] = {}
        self._proposals: list[Proposal] = []
        self._notify = notify or (lambda event: None)

    @property
    def participant_count(self) -> int:
        return len(self._participants)

    @property
    def proposal_count(self) -> int:
        return len(self._proposals)

    @property
    def voter_turnout(self) -> int:
        """Number of participants who have cast their vote."""
        return sum(1 for p in self._participants.values() if p.has_voted)

    def is_registered(self, identity: str) -> bool:
        participant = self._participants.get(identity)
        return participant is not None and participant.is_registered

    def register_participant(self, identity: str) -> None:
        if self.is_registered(identity):
            raise AlreadyRegistered(identity)
        self._participants[identity] = Participant(identity=identity, is_registered=True)
        logger.debug("Registered participant %s", identity)
        self._notify(VoterRegistered(voter=identity))

    def submit_proposal(self, description: str) -> int:
        """Append a proposal and return its id."""
        if not description or not description.strip():
            raise EmptyProposal()
        proposal_id = len(self._proposals)
        self._proposals.append(Proposal(proposal_id=proposal_id, description=description))
        logger.debug("Registered proposal #%d: %r", proposal_id, description)
        self._notify(ProposalRegistered(proposal_id=proposal_id))
        return proposal_id

    def get_participant(self, identity: str) -> Participant:
        """Get a participant; unknown identities yield a blank record."""
        participant = self._participants.get(identity)
        if participant is None:
            return Participant(identity=identity)
        return replace(participant)

    def get_proposal(self, proposal_id: int) -> Proposal:
        return replace(self._proposals[self._check_proposal_id(proposal_id)])

    def proposals(self) -> list[Proposal]:
        """All proposals, in id order."""
        return [replace(p) for p in self._proposals]

    def record_vote(self, identity: str, proposal_id: int) -> None:
        """Count one vote and mark the participant as having voted.

        The election checks these conditions first; they are checked again
        here so the one-vote rule holds at the storage boundary too.
        """
        index = self._check_proposal_id(proposal_id)
        participant = self._participants.get(identity)
        if participant is None or not participant.is_registered:
            raise NotAVoter(identity)
        if participant.has_voted:
            raise AlreadyVoted(identity)

        self._proposals[index].vote_count += 1
        participant.has_voted = True
        participant.voted_proposal_id = proposal_id
        logger.debug("Recorded vote from %s for proposal #%d", identity, proposal_id)

    def _check_proposal_id(self, proposal_id: int) -> int:
        # bool is an int subclass but never a valid id
        if (
            not isinstance(proposal_id, int)
            or isinstance(proposal_id, bool)
            or not 0 <= proposal_id < len(self._proposals)
        ):
            raise ProposalNotFound(proposal_id)
        return proposal_id
