"""Core data models for the election workflow."""

from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any, Self


class WorkflowStatus(IntEnum):
    """Phases of an election, in the only order they may occur."""
    REGISTERING_VOTERS = 0
    PROPOSALS_REGISTRATION_STARTED = 1
    PROPOSALS_REGISTRATION_ENDED = 2
    VOTING_SESSION_STARTED = 3
    VOTING_SESSION_ENDED = 4
    VOTES_TALLIED = 5

    @property
    def label(self) -> str:
        """CamelCase name, as shown to collaborators."""
        return "".join(part.capitalize() for part in self.name.split("_"))

    @property
    def is_terminal(self) -> bool:
        return self not in _TRANSITIONS

    def next(self) -> Self:
        """Return the single phase that may follow this one.

        Raises:
            ValueError: If this is the terminal phase.
        """
        try:
            return _TRANSITIONS[self]
        except KeyError:
            raise ValueError(f"{self.label} is a terminal phase") from None


# Forward-only edges; VOTES_TALLIED has no successor.
_TRANSITIONS: dict[WorkflowStatus, WorkflowStatus] = {
    WorkflowStatus.REGISTERING_VOTERS: WorkflowStatus.PROPOSALS_REGISTRATION_STARTED,
    WorkflowStatus.PROPOSALS_REGISTRATION_STARTED: WorkflowStatus.PROPOSALS_REGISTRATION_ENDED,
    WorkflowStatus.PROPOSALS_REGISTRATION_ENDED: WorkflowStatus.VOTING_SESSION_STARTED,
    WorkflowStatus.VOTING_SESSION_STARTED: WorkflowStatus.VOTING_SESSION_ENDED,
    WorkflowStatus.VOTING_SESSION_ENDED: WorkflowStatus.VOTES_TALLIED,
}


@dataclass
class Participant:
    """A voter record, keyed by an opaque identity.

    Attributes:
        identity: Account address or any other opaque caller identity
        is_registered: Set once by the administrator, never cleared
        has_voted: Becomes True on the participant's single vote
        voted_proposal_id: Proposal chosen; None until has_voted is True
    """
    identity: str
    is_registered: bool = False
    has_voted: bool = False
    voted_proposal_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Proposal:
    """A submitted option and its running vote count.

    Attributes:
        proposal_id: Zero-based id, assigned in submission order
        description: Non-empty text
        vote_count: Number of votes recorded for this proposal
    """
    proposal_id: int
    description: str
    vote_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# --- Notifications ---

@dataclass(frozen=True)
class Event:
    """Base class for state-change notifications."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, WorkflowStatus):
                data[key] = int(value)
        return {"event": self.name, **data}


@dataclass(frozen=True)
class VoterRegistered(Event):
    voter: str


@dataclass(frozen=True)
class ProposalRegistered(Event):
    proposal_id: int


@dataclass(frozen=True)
class Voted(Event):
    voter: str
    proposal_id: int


@dataclass(frozen=True)
class WorkflowStatusChange(Event):
    previous_status: WorkflowStatus
    new_status: WorkflowStatus


@dataclass(frozen=True)
class OwnershipTransferred(Event):
    previous_owner: str
    new_owner: str
