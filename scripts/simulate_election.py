"""Run a complete simulated election against a deployed election endpoint.

Generates an administrator, voters and proposals using faker with a fixed
seed, walks the election through every phase over HTTP, has each voter
vote for a random proposal, and prints the tally.

Usage:
    python scripts/simulate_election.py
    python scripts/simulate_election.py --url http://localhost:3000/api/election -v 25 -p 4
"""

import argparse
import random
import sys
from pathlib import Path
from typing import Any

import httpx
from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent))

from ballotbox.config import Config, configure_logging

SEED = 20260201


class ElectionRequestError(Exception):
    """The endpoint rejected a request."""

    def __init__(self, status: int, code: str, message: str):
        super().__init__(f"{code} ({status}): {message}")
        self.status = status
        self.code = code


class ElectionClient:
    """Thin JSON client for the election endpoint.

    Args:
        url: Endpoint URL (POST target)
        client: Optional pre-built httpx.Client, e.g. with a mock transport
    """

    def __init__(self, url: str, client: httpx.Client | None = None):
        self.url = url
        self._client = client or httpx.Client(follow_redirects=True, timeout=30.0)

    def call(self, caller: str, action: str, election_id: str | None = None, **params) -> Any:
        body = {"action": action, "caller": caller, **params}
        if election_id is not None:
            body["election_id"] = election_id

        try:
            response = self._client.post(self.url, json=body)
        except httpx.RequestError as e:
            raise ElectionRequestError(0, "RequestError", str(e)) from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            raise ElectionRequestError(
                response.status_code,
                data.get("code", "HTTPError"),
                data.get("error", response.text),
            )
        return data.get("result")

    def close(self) -> None:
        self._client.close()


def fake_identity(fake: Faker) -> str:
    """Account-address-like identity: 0x followed by 40 hex digits."""
    return fake.hexify(text="0x" + "^" * 40)


def simulate(
    client: ElectionClient,
    num_voters: int,
    num_proposals: int,
    seed: int = SEED,
) -> dict[str, Any]:
    """Drive one election from creation to tally.

    Returns:
        {"election_id", "admin", "voters", "proposals", "votes", "results"}
    """
    if num_voters < 1 or num_proposals < 1:
        raise ValueError("Need at least one voter and one proposal")

    fake = Faker()
    Faker.seed(seed)
    rng = random.Random(seed)

    admin = fake_identity(fake)
    voters: list[str] = []
    while len(voters) < num_voters:
        identity = fake_identity(fake)
        if identity != admin and identity not in voters:
            voters.append(identity)

    election_id = client.call(admin, "create_election")["election_id"]

    for voter in voters:
        client.call(admin, "register_participant", election_id, identity=voter)

    client.call(admin, "start_proposals_registering", election_id)
    proposals: dict[int, str] = {}
    for i in range(num_proposals):
        description = fake.sentence(nb_words=5)
        result = client.call(voters[i % len(voters)], "submit_proposal", election_id,
                             description=description)
        proposals[result["proposal_id"]] = description
    client.call(admin, "end_proposals_registering", election_id)

    client.call(admin, "start_voting_session", election_id)
    choices = sorted(proposals)
    votes: dict[str, int] = {}
    for voter in voters:
        choice = rng.choice(choices)
        client.call(voter, "cast_vote", election_id, proposal_id=choice)
        votes[voter] = choice
    client.call(admin, "end_voting_session", election_id)

    client.call(admin, "tally_votes", election_id)
    results = client.call(admin, "results", election_id)

    return {
        "election_id": election_id,
        "admin": admin,
        "voters": voters,
        "proposals": proposals,
        "votes": votes,
        "results": results,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Run a simulated election against an election endpoint")
    parser.add_argument("--url", default=Config.API_URL,
                        help=f"Endpoint URL (default: {Config.API_URL})")
    parser.add_argument("-v", "--voters", type=int, default=10,
                        help="Number of voters (default: 10)")
    parser.add_argument("-p", "--proposals", type=int, default=3,
                        help="Number of proposals (default: 3)")
    parser.add_argument("--seed", type=int, default=SEED,
                        help=f"Random seed (default: {SEED})")
    args = parser.parse_args()

    configure_logging()
    client = ElectionClient(args.url)
    try:
        outcome = simulate(client, args.voters, args.proposals, args.seed)
    except ElectionRequestError as e:
        print(f"Simulation failed: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        client.close()

    print(f"Election {outcome['election_id']} (admin {outcome['admin']})")
    print(f"{len(outcome['voters'])} voters, {len(outcome['proposals'])} proposals")
    results = outcome["results"]
    for proposal_id, description in sorted(outcome["proposals"].items()):
        count = results["vote_counts"][str(proposal_id)]
        print(f"  #{proposal_id} {description} -> {count} votes")

    winner = results["winning_proposal_id"]
    print(f"Winner: #{winner} {outcome['proposals'][winner]}")
    if len(results["tied"]) > 1:
        print(f"(tie between {results['tied']}, first to reach the top count wins)")


if __name__ == "__main__":
    main()
