"""Share-link encoding for read-only schedule views.

A share link carries the whole schedule as URL-safe base64 of its JSON
document in the ``data`` query parameter, e.g.
``https://planner.example/view?data=eyJuYW1lIjoi...``.

Links created before assignments had their own week range are migrated on
decode: each assignment without ``startWeek``/``endWeek`` inherits the
range of its project.
"""

import base64
import binascii
import json
import logging
from typing import Any
from urllib.parse import parse_qs, urlencode, urlsplit

from capplanner.domain.models import Schedule
from capplanner.serialization.json_codec import (
    ScheduleFormatError,
    schedule_from_dict,
    schedule_to_dict,
)

logger = logging.getLogger(__name__)

SHARE_PARAM = "data"
VIEW_PATH = "/view"


def encode_share_token(schedule: Schedule) -> str:
    """Encode a schedule as an unpadded URL-safe base64 token."""
    payload = json.dumps(
        schedule_to_dict(schedule), ensure_ascii=False, separators=(",", ":")
    ).encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")


def build_share_url(base_url: str, schedule: Schedule) -> str:
    """Build a read-only view URL for a schedule."""
    query = urlencode({SHARE_PARAM: encode_share_token(schedule)})
    return f"{base_url.rstrip('/')}{VIEW_PATH}?{query}"


def _extract_token(token_or_url: str) -> str:
    text = token_or_url.strip()
    if "?" not in text:
        return text
    values = parse_qs(urlsplit(text).query).get(SHARE_PARAM)
    if not values:
        raise ScheduleFormatError("No schedule data found in URL")
    # parse_qs turns an unescaped "+" of standard base64 into a space
    return values[0].replace(" ", "+")


def _decode_payload(token: str) -> Any:
    padded = token + "=" * (-len(token) % 4)
    try:
        # Links from the browser app use the standard alphabet.
        if "+" in padded or "/" in padded:
            raw = base64.b64decode(padded, validate=True)
        else:
            raw = base64.urlsafe_b64decode(padded)
        return json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ScheduleFormatError("Invalid schedule data") from e


def migrate_assignment_ranges(data: dict[str, Any]) -> dict[str, Any]:
    """Backfill assignment ranges from their project's range.

    Returns a new document; the input is not modified.
    """
    projects = data.get("projects")
    if not isinstance(projects, list):
        return data

    migrated = []
    backfilled = 0
    for project in projects:
        if not isinstance(project, dict):
            migrated.append(project)
            continue
        assignments = []
        for assignment in project.get("assignments") or []:
            if isinstance(assignment, dict) and not (
                assignment.get("startWeek") and assignment.get("endWeek")
            ):
                backfilled += 1
                assignment = {
                    **assignment,
                    "startWeek": assignment.get("startWeek") or project.get("startWeek"),
                    "endWeek": assignment.get("endWeek") or project.get("endWeek"),
                }
            assignments.append(assignment)
        migrated.append({**project, "assignments": assignments})

    if backfilled:
        logger.debug("Backfilled week ranges on %d legacy assignment(s)", backfilled)
    return {**data, "projects": migrated}


def decode_share_token(token_or_url: str) -> Schedule:
    """Decode a share token or full share URL back into a Schedule.

    Raises:
        ScheduleFormatError: If the link carries no data or the payload
            cannot be decoded.
    """
    token = _extract_token(token_or_url)
    if not token:
        raise ScheduleFormatError("No schedule data found in URL")
    data = _decode_payload(token)
    if not isinstance(data, dict):
        raise ScheduleFormatError("Invalid schedule data")
    return schedule_from_dict(migrate_assignment_ranges(data))
