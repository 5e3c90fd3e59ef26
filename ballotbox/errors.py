"""Errors raised when an election operation is rejected.

Every error is a precondition violation detected before any state is
touched, so a rejected call leaves the election exactly as it was.
"""

from ballotbox.models import WorkflowStatus


class ElectionError(Exception):
    """Base class for rejected election operations."""

    @property
    def code(self) -> str:
        return type(self).__name__


class NotOwner(ElectionError):
    """Caller is not the election administrator."""

    def __init__(self, caller: str):
        super().__init__("Caller is not the owner")
        self.caller = caller


class NotAVoter(ElectionError):
    """Caller is not a registered participant."""

    def __init__(self, caller: str):
        super().__init__("You're not a voter")
        self.caller = caller


class WrongPhase(ElectionError):
    """Operation is not allowed in the current workflow phase."""

    def __init__(self, message: str, expected: WorkflowStatus, actual: WorkflowStatus):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class AlreadyRegistered(ElectionError):
    def __init__(self, identity: str):
        super().__init__("Already registered")
        self.identity = identity


class AlreadyVoted(ElectionError):
    def __init__(self, identity: str):
        super().__init__("You have already voted")
        self.identity = identity


class EmptyProposal(ElectionError):
    def __init__(self):
        super().__init__("A proposal cannot be empty")


class ProposalNotFound(ElectionError):
    def __init__(self, proposal_id: int):
        super().__init__("Proposal not found")
        self.proposal_id = proposal_id
