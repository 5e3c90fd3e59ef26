"""Hosts many elections and dispatches named actions to them."""

import logging
import threading
import uuid
from collections.abc import Callable
from typing import Any

from ballotbox.config import Config
from ballotbox.workflow import Election

logger = logging.getLogger(__name__)

ActionHandler = Callable[[Election, str, dict[str, Any]], Any]

# Action registry - populated by the @action decorator below
_actions: dict[str, ActionHandler] = {}


def action(name: str) -> Callable[[ActionHandler], ActionHandler]:
    """Decorator to register a dispatchable election action."""
    def register(func: ActionHandler) -> ActionHandler:
        _actions[name] = func
        return func
    return register


def get_action_names() -> list[str]:
    """Return the names of all dispatchable actions, plus create_election."""
    return ["create_election", *sorted(_actions)]


class ElectionNotFound(KeyError):
    """No election exists with the given id."""

    def __str__(self) -> str:
        return f"Election not found: {self.args[0]}"


class UnknownAction(ValueError):
    """The requested action is not one the service knows."""
    pass


class InvalidRequest(ValueError):
    """A required parameter is missing or has the wrong type."""
    pass


class ElectionService:
    """In-memory collection of elections, keyed by generated id.

    Elections are independent: each has its own lock, so operations on
    different elections never wait on each other.
    """

    def __init__(self, seed_genesis: bool | None = None, genesis_description: str | None = None):
        self._elections: dict[str, Election] = {}
        self._lock = threading.Lock()
        self.seed_genesis = Config.SEED_GENESIS if seed_genesis is None else seed_genesis
        self.genesis_description = genesis_description or Config.GENESIS_DESCRIPTION

    def create_election(self, admin: str, seed_genesis: bool | None = None) -> str:
        """Create an election administered by `admin` and return its id."""
        election = Election(
            admin,
            seed_genesis=self.seed_genesis if seed_genesis is None else seed_genesis,
            genesis_description=self.genesis_description,
        )
        election_id = uuid.uuid4().hex
        with self._lock:
            self._elections[election_id] = election
        logger.info("Created election %s administered by %s", election_id, admin)
        return election_id

    def get(self, election_id: str) -> Election:
        with self._lock:
            try:
                return self._elections[election_id]
            except KeyError:
                raise ElectionNotFound(election_id) from None

    def dispatch(
        self,
        election_id: str | None,
        caller: str,
        action_name: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Run one action and return a JSON-friendly result.

        Args:
            election_id: Target election (ignored for create_election)
            caller: Identity of whoever is making the call
            action_name: One of get_action_names()
            params: Action-specific parameters

        Raises:
            UnknownAction: If the action does not exist
            InvalidRequest: If a parameter is missing or malformed
            ElectionNotFound: If the election does not exist
            ElectionError: If the election rejects the operation
        """
        params = params or {}
        if not caller or not isinstance(caller, str):
            raise InvalidRequest("Missing 'caller'")

        if action_name == "create_election":
            seed_genesis = params.get("seed_genesis")
            if seed_genesis is not None and not isinstance(seed_genesis, bool):
                raise InvalidRequest("'seed_genesis' must be a boolean")
            return {"election_id": self.create_election(caller, seed_genesis)}

        handler = _actions.get(action_name)
        if handler is None:
            raise UnknownAction(f"Unknown action: {action_name!r}")
        if not election_id:
            raise InvalidRequest("Missing 'election_id'")

        return handler(self.get(election_id), caller, params)


def _str_param(params: dict[str, Any], name: str) -> str:
    value = params.get(name)
    if not isinstance(value, str):
        raise InvalidRequest(f"Missing or non-string '{name}'")
    return value


def _int_param(params: dict[str, Any], name: str) -> int:
    value = params.get(name)
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidRequest(f"Missing or non-integer '{name}'")
    return value


# --- Actions ---

@action("register_participant")
def _register_participant(election: Election, caller: str, params: dict[str, Any]) -> None:
    election.register_participant(caller, _str_param(params, "identity"))


@action("submit_proposal")
def _submit_proposal(election: Election, caller: str, params: dict[str, Any]) -> dict[str, int]:
    return {"proposal_id": election.submit_proposal(caller, _str_param(params, "description"))}


@action("cast_vote")
def _cast_vote(election: Election, caller: str, params: dict[str, Any]) -> None:
    election.cast_vote(caller, _int_param(params, "proposal_id"))


@action("start_proposals_registering")
def _start_proposals_registering(election: Election, caller: str, params: dict[str, Any]) -> None:
    election.start_proposals_registering(caller)


@action("end_proposals_registering")
def _end_proposals_registering(election: Election, caller: str, params: dict[str, Any]) -> None:
    election.end_proposals_registering(caller)


@action("start_voting_session")
def _start_voting_session(election: Election, caller: str, params: dict[str, Any]) -> None:
    election.start_voting_session(caller)


@action("end_voting_session")
def _end_voting_session(election: Election, caller: str, params: dict[str, Any]) -> None:
    election.end_voting_session(caller)


@action("tally_votes")
def _tally_votes(election: Election, caller: str, params: dict[str, Any]) -> dict[str, int | None]:
    return {"winning_proposal_id": election.tally_votes(caller)}


@action("transfer_ownership")
def _transfer_ownership(election: Election, caller: str, params: dict[str, Any]) -> None:
    election.transfer_ownership(caller, _str_param(params, "new_admin"))


@action("get_participant")
def _get_participant(election: Election, caller: str, params: dict[str, Any]) -> dict[str, Any]:
    return election.get_participant(caller, _str_param(params, "identity")).to_dict()


@action("get_proposal")
def _get_proposal(election: Election, caller: str, params: dict[str, Any]) -> dict[str, Any]:
    return election.get_proposal(caller, _int_param(params, "proposal_id")).to_dict()


@action("get_proposals")
def _get_proposals(election: Election, caller: str, params: dict[str, Any]) -> list[dict[str, Any]]:
    return [p.to_dict() for p in election.get_proposals(caller)]


@action("get_winning_proposal_id")
def _get_winning_proposal_id(election: Election, caller: str, params: dict[str, Any]) -> dict[str, int | None]:
    return {"winning_proposal_id": election.get_winning_proposal_id()}


@action("workflow_status")
def _workflow_status(election: Election, caller: str, params: dict[str, Any]) -> dict[str, Any]:
    status = election.workflow_status
    return {"workflow_status": int(status), "label": status.label}


@action("results")
def _results(election: Election, caller: str, params: dict[str, Any]) -> dict[str, Any]:
    return election.results().to_dict()


@action("summary")
def _summary(election: Election, caller: str, params: dict[str, Any]) -> dict[str, Any]:
    return election.to_dict()


@action("events")
def _events(election: Election, caller: str, params: dict[str, Any]) -> list[dict[str, Any]]:
    since = params.get("since", 0)
    if not isinstance(since, int) or isinstance(since, bool):
        raise InvalidRequest("'since' must be an integer")
    return [entry.to_dict() for entry in election.events.since(since)]
