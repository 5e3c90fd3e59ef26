"""Tests for the serverless election handler."""

import importlib
import json
import logging
from types import SimpleNamespace

import pytest
from tests.conftest import ADMIN, NON_VOTER, VOTER_ONE

import api.election
from api.election import handler
from ballotbox.service import ElectionService


def make_request(body=None, method="POST", content_type="application/json"):
    raw = body if isinstance(body, bytes) else json.dumps(body or {}).encode("utf-8")
    return SimpleNamespace(method=method, headers={"content-type": content_type}, body=raw)


class TestElectionHandler:
    def setup_method(self):
        self.service = ElectionService(seed_genesis=False)
        response = self.post({"action": "create_election", "caller": ADMIN})
        self.election_id = response["result"]["election_id"]

    def send(self, body, **kwargs):
        return handler(make_request(body, **kwargs), election_service=self.service)

    def post(self, body):
        response = self.send(body)
        return json.loads(response["body"])

    def call(self, caller, action, **params):
        response = self.send({
            "action": action, "caller": caller, "election_id": self.election_id, **params,
        })
        return response["statusCode"], json.loads(response["body"])

    def test_success(self):
        status, body = self.call(ADMIN, "register_participant", identity=VOTER_ONE)
        assert status == 200
        assert body == {"result": None}

    def test_params_reach_action(self):
        self.call(ADMIN, "register_participant", identity=VOTER_ONE)
        self.call(ADMIN, "start_proposals_registering")
        status, body = self.call(VOTER_ONE, "submit_proposal", description="A")
        assert status == 200
        assert body == {"result": {"proposal_id": 0}}

    @pytest.mark.parametrize("caller,action,params,status,code", [
        (VOTER_ONE, "start_proposals_registering", {}, 403, "NotOwner"),
        (NON_VOTER, "get_proposal", {"proposal_id": 0}, 403, "NotAVoter"),
        (ADMIN, "tally_votes", {}, 409, "WrongPhase"),
        (ADMIN, "register_participant", {"identity": VOTER_ONE}, 409, "AlreadyRegistered"),
        (ADMIN, "self_destruct", {}, 400, "UnknownAction"),
        (ADMIN, "register_participant", {}, 400, "InvalidRequest"),
        (ADMIN, "register_participant", {"identity": ""}, 400, "InvalidRequest"),
    ])
    def test_error_mapping(self, caller, action, params, status, code):
        self.call(ADMIN, "register_participant", identity=VOTER_ONE)
        actual_status, body = self.call(caller, action, **params)
        assert actual_status == status
        assert body["code"] == code
        assert body["error"]

    def test_proposal_not_found(self):
        self.call(ADMIN, "register_participant", identity=VOTER_ONE)
        status, body = self.call(VOTER_ONE, "get_proposal", proposal_id=3)
        assert status == 404
        assert body["code"] == "ProposalNotFound"

    def test_empty_proposal(self):
        self.call(ADMIN, "register_participant", identity=VOTER_ONE)
        status, body = self.call(VOTER_ONE, "submit_proposal", description="")
        assert status == 400
        assert body["code"] == "EmptyProposal"

    def test_already_voted(self):
        self.call(ADMIN, "register_participant", identity=VOTER_ONE)
        self.call(ADMIN, "start_proposals_registering")
        self.call(VOTER_ONE, "submit_proposal", description="A")
        self.call(ADMIN, "end_proposals_registering")
        self.call(ADMIN, "start_voting_session")
        self.call(VOTER_ONE, "cast_vote", proposal_id=0)
        status, body = self.call(VOTER_ONE, "cast_vote", proposal_id=0)
        assert status == 409
        assert body["code"] == "AlreadyVoted"

    def test_unknown_election(self):
        response = self.send({"action": "summary", "caller": ADMIN, "election_id": "missing"})
        assert response["statusCode"] == 404
        assert json.loads(response["body"])["code"] == "ElectionNotFound"

    def test_missing_action(self):
        response = self.send({"caller": ADMIN})
        assert response["statusCode"] == 400

    def test_invalid_json(self):
        response = self.send(b"{not json")
        assert response["statusCode"] == 400
        assert "Invalid JSON" in json.loads(response["body"])["error"]

    def test_body_must_be_object(self):
        response = self.send(b"[1, 2]")
        assert response["statusCode"] == 400

    def test_wrong_content_type(self):
        response = self.send({"action": "summary"}, content_type="text/plain")
        assert response["statusCode"] == 400

    def test_method_not_allowed(self):
        response = self.send({}, method="GET")
        assert response["statusCode"] == 405

    def test_cors_preflight(self):
        response = self.send({}, method="OPTIONS")
        assert response["statusCode"] == 204
        assert response["headers"]["Access-Control-Allow-Methods"] == "POST, OPTIONS"

    def test_internal_error(self, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(self.service, "dispatch", explode)
        response = self.send({"action": "summary", "caller": ADMIN})
        assert response["statusCode"] == 500
        assert json.loads(response["body"])["code"] == "InternalError"


class TestHandlerLogging:
    def setup_method(self):
        self.logger = logging.getLogger("ballotbox")
        self.saved = (self.logger.level, list(self.logger.handlers))
        self.logger.handlers.clear()

    def teardown_method(self):
        self.logger.setLevel(self.saved[0])
        self.logger.handlers[:] = self.saved[1]

    def test_import_leaves_logging_alone(self):
        importlib.reload(api.election)
        assert self.logger.handlers == []

    def test_first_request_configures_logging(self):
        handler(make_request(method="OPTIONS"), election_service=ElectionService())
        handler(make_request(method="OPTIONS"), election_service=ElectionService())
        assert len(self.logger.handlers) == 1
