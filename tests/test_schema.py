"""
Tests for schema validation and document conversion.
"""

from candidatehub.models import AnalysisResult, Candidate, CommitMetrics
from candidatehub.schema import validate_analysis, validate_status

from conftest import make_candidate


class TestValidateAnalysis:
    """Test analysis result validation."""

    def test_valid_analysis(self, valid_analysis):
        """Valid analysis should have no errors."""
        assert validate_analysis(valid_analysis) == []

    def test_non_object_analysis(self):
        """Arrays and scalars are rejected instead of crashing."""
        for data in ([1, 2], "octocat", 42, None):
            assert validate_analysis(data) == ["Analysis must be a JSON object"]

    def test_missing_profile(self, valid_analysis):
        del valid_analysis["profile"]
        errors = validate_analysis(valid_analysis)
        assert any("profile" in err.lower() for err in errors)

    def test_blank_username(self, valid_analysis):
        valid_analysis["profile"]["githubUsername"] = "   "
        errors = validate_analysis(valid_analysis)
        assert any("githubusername" in err.lower() for err in errors)

    def test_optional_profile_fields(self, valid_analysis):
        """name, email and avatarUrl can be omitted or null."""
        valid_analysis["profile"] = {"githubUsername": "octocat", "email": None}
        assert validate_analysis(valid_analysis) == []

    def test_invalid_email(self, valid_analysis):
        valid_analysis["profile"]["email"] = "not-an-email"
        errors = validate_analysis(valid_analysis)
        assert any("email" in err.lower() for err in errors)

    def test_invalid_avatar_url(self, valid_analysis):
        valid_analysis["profile"]["avatarUrl"] = "avatar.png"
        errors = validate_analysis(valid_analysis)
        assert any("avatarurl" in err.lower() for err in errors)

    def test_non_numeric_match_score(self, valid_analysis):
        valid_analysis["matchScore"] = "90"
        errors = validate_analysis(valid_analysis)
        assert any("matchscore" in err.lower() for err in errors)

    def test_boolean_is_not_a_number(self, valid_analysis):
        valid_analysis["matchScore"] = True
        assert validate_analysis(valid_analysis) != []

    def test_missing_metric(self, valid_analysis):
        del valid_analysis["metrics"]["totalCommits"]
        errors = validate_analysis(valid_analysis)
        assert errors == ["Field 'metrics.totalCommits' must be a number"]

    def test_missing_benchmark(self, valid_analysis):
        del valid_analysis["benchmark"]
        errors = validate_analysis(valid_analysis)
        assert any("benchmark" in err.lower() for err in errors)


class TestValidateStatus:

    def test_known_statuses(self):
        for status in ["pending", "reviewed", "hired", "rejected"]:
            assert validate_status(status) == []

    def test_unknown_status(self):
        assert validate_status("promoted") != []


class TestDocuments:
    """Test conversion between Candidate and store documents."""

    def test_document_uses_camel_case_and_omits_id(self):
        doc = make_candidate("a", "alice", match_score=88).to_document()

        assert "id" not in doc
        assert doc["githubUsername"] == "alice"
        assert doc["matchScore"] == 88
        assert doc["commitMetrics"]["totalCommits"] == 100
        assert doc["createdAt"] == "2024-05-01T12:00:00.000Z"

    def test_from_document_restores_candidate(self):
        original = make_candidate("a", "alice")

        restored = Candidate.from_document("a", original.to_document())

        assert restored == original

    def test_from_document_fills_defaults(self):
        candidate = Candidate.from_document("x", {"githubUsername": "sparse"})

        assert candidate.name == "sparse"
        assert candidate.status == "pending"
        assert candidate.match_score == 0
        assert candidate.commit_metrics == CommitMetrics()

    def test_analysis_from_dict(self, valid_analysis):
        result = AnalysisResult.from_dict(valid_analysis)

        assert result.profile.github_username == "octocat"
        assert result.profile.avatar_url == "https://avatars.githubusercontent.com/u/583231"
        assert result.metrics.consistency_score == 72.5
        assert result.metrics.total_commits == 412
        assert result.match_score == 86
        assert result.benchmark == "senior-backend"
