"""Vote counting: highest count wins, first to reach it on ties."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ballotbox.models import Proposal


@dataclass(frozen=True)
class TallyResult:
    """Outcome of a tally.

    Attributes:
        winning_proposal_id: Id of the winner, or None if there were no proposals
        vote_counts: Proposal id -> votes received, in id order
        tied: Ids sharing the top count, winner first (only the winner if no tie)
        details: Extra information for transparency (e.g. the tie-break rule)
    """
    winning_proposal_id: int | None
    vote_counts: dict[int, int]
    tied: list[int] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def total_votes(self) -> int:
        return sum(self.vote_counts.values())

    @property
    def is_tie(self) -> bool:
        return len(self.tied) > 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "winning_proposal_id": self.winning_proposal_id,
            # JSON object keys must be strings
            "vote_counts": {str(k): v for k, v in self.vote_counts.items()},
            "total_votes": self.total_votes,
            "tied": list(self.tied),
            "details": dict(self.details),
        }


def tally(proposals: Sequence[Proposal]) -> TallyResult:
    """Find the proposal with the most votes.

    Proposals are scanned once in ascending id order. A later proposal
    only takes the lead with a strictly greater count, so the first
    proposal to reach the maximum wins a tie.

    Example:
        counts [3, 5, 5] -> winner 1 (proposal 2 ties but came later)

    Args:
        proposals: Proposals in ascending id order

    Returns:
        TallyResult; winning_proposal_id is None only when there are no proposals.
    """
    winner: Proposal | None = None
    for proposal in proposals:
        if winner is None or proposal.vote_count > winner.vote_count:
            winner = proposal

    vote_counts = {p.proposal_id: p.vote_count for p in proposals}
    if winner is None:
        return TallyResult(winning_proposal_id=None, vote_counts=vote_counts)

    tied = [pid for pid, count in vote_counts.items() if count == winner.vote_count]
    return TallyResult(
        winning_proposal_id=winner.proposal_id,
        vote_counts=vote_counts,
        tied=tied,
        details={
            "winning_vote_count": winner.vote_count,
            "tiebreak": "first-to-reach-max" if len(tied) > 1 else None,
        },
    )
