"""Vercel serverless function for running elections."""

import json
import logging
import sys
from pathlib import Path

# Add the project root to the path so we can import ballotbox
sys.path.insert(0, str(Path(__file__).parent.parent))

from ballotbox.config import configure_logging
from ballotbox.errors import (
    AlreadyRegistered,
    AlreadyVoted,
    ElectionError,
    EmptyProposal,
    NotAVoter,
    NotOwner,
    ProposalNotFound,
    WrongPhase,
)
from ballotbox.service import ElectionNotFound, ElectionService, InvalidRequest, UnknownAction

logger = logging.getLogger("ballotbox.api")

# One service per warm instance; elections live as long as the process does
service = ElectionService()

ERROR_STATUS: dict[type[ElectionError], int] = {
    NotOwner: 403,
    NotAVoter: 403,
    ProposalNotFound: 404,
    WrongPhase: 409,
    AlreadyRegistered: 409,
    AlreadyVoted: 409,
    EmptyProposal: 400,
}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

# Keys of the request body that are not action parameters
_ENVELOPE_KEYS = ("action", "caller", "election_id")


def handler(request, election_service: ElectionService | None = None):
    """Handle an election action.

    Accepts POST with a JSON body:
        {"action": "cast_vote", "caller": "0xabc...",
         "election_id": "...", "proposal_id": 1}

    Any keys other than action, caller and election_id are passed to the
    action as parameters. Returns {"result": ...} on success, or
    {"error": ..., "code": ...} with an appropriate status otherwise.
    """
    configure_logging()
    election_service = election_service or service

    if request.method == "OPTIONS":
        return {"statusCode": 204, "headers": dict(CORS_HEADERS), "body": ""}

    if request.method != "POST":
        return create_response(
            {"error": "Method not allowed. Use POST.", "code": "MethodNotAllowed"},
            status=405,
        )

    try:
        content_type = request.headers.get("content-type", "")
        if "application/json" not in content_type:
            return create_response(
                {"error": f"Unsupported content type: {content_type}", "code": "InvalidRequest"},
                status=400,
            )

        body = request.body.decode("utf-8")
        data = json.loads(body)
        if not isinstance(data, dict):
            raise InvalidRequest("Request body must be a JSON object")

        action_name = data.get("action")
        if not action_name:
            raise InvalidRequest("Missing 'action' in request body")

        params = {k: v for k, v in data.items() if k not in _ENVELOPE_KEYS}
        result = election_service.dispatch(
            data.get("election_id"), data.get("caller"), action_name, params
        )
        return create_response({"result": result})

    except ElectionError as e:
        return create_response(
            {"error": str(e), "code": e.code},
            status=ERROR_STATUS.get(type(e), 400),
        )
    except ElectionNotFound as e:
        return create_response({"error": str(e), "code": "ElectionNotFound"}, status=404)
    except (InvalidRequest, UnknownAction) as e:
        return create_response({"error": str(e), "code": type(e).__name__}, status=400)
    except json.JSONDecodeError as e:
        return create_response({"error": f"Invalid JSON: {e}", "code": "InvalidRequest"}, status=400)
    except ValueError as e:
        return create_response({"error": str(e), "code": "InvalidRequest"}, status=400)
    except Exception as e:
        logger.exception("Unhandled error in election handler")
        return create_response(
            {"error": f"Internal error: {e}", "code": "InternalError"},
            status=500,
        )


def create_response(payload: dict, status: int = 200) -> dict:
    """Wrap a JSON payload in the response shape the Vercel runtime expects."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json", **CORS_HEADERS},
        "body": json.dumps(payload),
    }
