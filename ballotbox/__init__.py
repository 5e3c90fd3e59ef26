"""Single-election voting workflow: register, propose, vote, tally."""

from .errors import (
    AlreadyRegistered,
    AlreadyVoted,
    ElectionError,
    EmptyProposal,
    NotAVoter,
    NotOwner,
    ProposalNotFound,
    WrongPhase,
)
from .events import EventFeed, EventLog, LogEntry
from .models import (
    Event,
    OwnershipTransferred,
    Participant,
    Proposal,
    ProposalRegistered,
    Voted,
    VoterRegistered,
    WorkflowStatus,
    WorkflowStatusChange,
)
from .registry import Registry
from .tally import TallyResult, tally
from .workflow import Election

__all__ = [
    "AlreadyRegistered",
    "AlreadyVoted",
    "Election",
    "ElectionError",
    "EmptyProposal",
    "Event",
    "EventFeed",
    "EventLog",
    "LogEntry",
    "NotAVoter",
    "NotOwner",
    "OwnershipTransferred",
    "Participant",
    "Proposal",
    "ProposalNotFound",
    "ProposalRegistered",
    "Registry",
    "TallyResult",
    "Voted",
    "VoterRegistered",
    "WorkflowStatus",
    "WorkflowStatusChange",
    "WrongPhase",
    "tally",
]
