from typing import Any, Dict, List
from urllib.parse import urlparse

from .models import CANDIDATE_STATUSES, METRIC_FIELDS

OPTIONAL_PROFILE_STR_FIELDS = ["name", "email", "avatarUrl"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _valid_url(v: str) -> bool:
    try:
        p = urlparse(v)
        return bool(p.scheme and p.netloc)
    except Exception:
        return False


def validate_analysis(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for an analysis result.
    Empty list means valid.
    """
    if not isinstance(data, dict):
        return ["Analysis must be a JSON object"]

    errors: List[str] = []

    profile = data.get("profile")
    if not isinstance(profile, dict):
        errors.append("Missing required object: profile")
    else:
        if not _is_non_empty_str(profile.get("githubUsername")):
            errors.append("Field 'profile.githubUsername' must be a non-empty string")

        for f in OPTIONAL_PROFILE_STR_FIELDS:
            if profile.get(f) is not None and not isinstance(profile[f], str):
                errors.append(f"Field 'profile.{f}' must be a string if provided")

        if _is_non_empty_str(profile.get("email")) and "@" not in profile["email"]:
            errors.append("Field 'profile.email' must be an email address")

        if _is_non_empty_str(profile.get("avatarUrl")) and not _valid_url(profile["avatarUrl"]):
            errors.append("Field 'profile.avatarUrl' must be a valid absolute URL (scheme + host)")

    if not _is_number(data.get("matchScore")):
        errors.append("Field 'matchScore' must be a number")

    metrics = data.get("metrics")
    if not isinstance(metrics, dict):
        errors.append("Missing required object: metrics")
    else:
        for f in METRIC_FIELDS.values():
            if not _is_number(metrics.get(f)):
                errors.append(f"Field 'metrics.{f}' must be a number")

    if not isinstance(data.get("benchmark"), str):
        errors.append("Field 'benchmark' must be a string")

    return errors


def validate_status(status: Any) -> List[str]:
    if status not in CANDIDATE_STATUSES:
        return [f"Status must be one of: {', '.join(CANDIDATE_STATUSES)}"]
    return []
