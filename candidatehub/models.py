"""
Candidate data model.

Store documents keep the camelCase field names used by the existing
collection; the Python side uses snake_case attributes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

CANDIDATE_STATUSES = ("pending", "reviewed", "hired", "rejected")
DEFAULT_STATUS = "pending"

METRIC_FIELDS = {
    "code_quality_score": "codeQualityScore",
    "consistency_score": "consistencyScore",
    "collaboration_score": "collaborationScore",
    "technical_diversity_score": "technicalDiversityScore",
    "overall_score": "overallScore",
    "total_commits": "totalCommits",
}


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


@dataclass
class CommitMetrics:
    code_quality_score: float = 0
    consistency_score: float = 0
    collaboration_score: float = 0
    technical_diversity_score: float = 0
    overall_score: float = 0
    total_commits: int = 0

    def to_document(self) -> Dict[str, Any]:
        return {doc_key: getattr(self, attr) for attr, doc_key in METRIC_FIELDS.items()}

    @classmethod
    def from_document(cls, data: Optional[Dict[str, Any]]) -> "CommitMetrics":
        data = data or {}
        values = {attr: _number(data.get(doc_key)) for attr, doc_key in METRIC_FIELDS.items()}
        values["total_commits"] = int(values["total_commits"])
        return cls(**values)


@dataclass
class Candidate:
    """A hiring-pipeline record keyed by id, merged on github_username."""

    id: str
    name: str
    email: str
    github_username: str
    avatar_url: Optional[str] = None
    match_score: float = 0
    status: str = DEFAULT_STATUS
    commit_metrics: CommitMetrics = field(default_factory=CommitMetrics)
    position: str = ""
    created_at: str = field(default_factory=utc_timestamp)

    def to_document(self) -> Dict[str, Any]:
        """Fields as written to the store. The id lives in the document key."""
        return {
            "name": self.name,
            "email": self.email,
            "githubUsername": self.github_username,
            "avatarUrl": self.avatar_url,
            "matchScore": self.match_score,
            "status": self.status,
            "commitMetrics": self.commit_metrics.to_document(),
            "position": self.position,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Candidate":
        username = data.get("githubUsername") or ""
        return cls(
            id=doc_id,
            name=data.get("name") or username,
            email=data.get("email") or "",
            github_username=username,
            avatar_url=data.get("avatarUrl"),
            match_score=_number(data.get("matchScore")),
            status=data.get("status") or DEFAULT_STATUS,
            commit_metrics=CommitMetrics.from_document(data.get("commitMetrics")),
            position=data.get("position") or "",
            created_at=data.get("createdAt") or "",
        )


@dataclass
class CandidateProfile:
    github_username: str
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass
class AnalysisResult:
    """Output of a profile analysis, ingested with upsert_from_analysis."""

    profile: CandidateProfile
    metrics: CommitMetrics
    match_score: float
    benchmark: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        """Build from the camelCase JSON shape. Run validate_analysis first."""
        profile = data.get("profile") or {}
        return cls(
            profile=CandidateProfile(
                github_username=profile["githubUsername"],
                name=profile.get("name"),
                email=profile.get("email"),
                avatar_url=profile.get("avatarUrl"),
            ),
            metrics=CommitMetrics.from_document(data.get("metrics")),
            match_score=_number(data.get("matchScore")),
            benchmark=data.get("benchmark") or "",
        )
