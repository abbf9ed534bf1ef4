"""
Tests for unique lookups, ordering, projection and operation arguments.
"""

from itertools import combinations

import pytest

from core.errors import IssueKind
from schemas import SortOrder, validate


USER_ID = "3f2b8c1e-9a4d-4c7e-8b1f-2d6e5a7c9b0d"
USER_KEYS = {"id": USER_ID, "email": "jane.doe@acme.io", "phone": "+14155550123"}


class TestWhereUnique:
    """Test unique key selection."""

    @pytest.mark.parametrize("keys", [
        combo for size in (1, 2, 3) for combo in combinations(sorted(USER_KEYS), size)
    ])
    def test_any_unique_subset_selects(self, registry, keys):
        data = {key: USER_KEYS[key] for key in keys}
        result = validate("UserWhereUniqueInput", data)
        assert result.ok
        assert result.data == data

    @pytest.mark.parametrize("data", [
        {},
        {"name": "Jane Doe"},
        {"role": "ADMIN", "AND": [{"email": "jane.doe@acme.io"}]},
    ])
    def test_no_unique_selector(self, registry, data):
        result = validate("UserWhereUniqueInput", data)
        assert not result.ok
        (issue,) = result.issues
        assert issue.kind is IssueKind.UNIQUENESS_VIOLATION
        assert issue.path == ""
        assert "id, email, phone, id_email_phone" in issue.message

    def test_unique_with_extra_filters(self, registry):
        """Non-unique columns narrow a unique lookup."""
        result = validate("UserWhereUniqueInput", {
            "email": "jane.doe@acme.io",
            "name": {"startsWith": "J"},
            "profile": {"is": {"city": "Paris"}},
        })
        assert result.ok

    def test_unique_value_is_plain(self, registry):
        """Unique columns take a value, not a filter object."""
        assert not validate("UserWhereUniqueInput", {"email": {"equals": "jane.doe@acme.io"}}).ok

    def test_compound_key(self, registry):
        result = validate("UserWhereUniqueInput", {"id_email_phone": dict(USER_KEYS)})
        assert result.ok
        assert result.data == {"id_email_phone": USER_KEYS}

    def test_compound_key_requires_every_column(self, registry):
        result = validate(
            "UserWhereUniqueInput", {"id_email_phone": {"id": USER_ID, "email": "a@acme.io"}}
        )
        assert not result.ok
        assert result.issues[0].path == "id_email_phone.phone"
        assert result.issues[0].kind is IssueKind.SHAPE_VIOLATION

    def test_composite_primary_key(self, registry):
        """JobsAndResumes is selected by the pair only."""
        assert validate(
            "JobsAndResumesWhereUniqueInput", {"jobId_resumeId": {"jobId": "j1", "resumeId": "r1"}}
        ).ok
        result = validate("JobsAndResumesWhereUniqueInput", {"jobId": "j1"})
        assert not result.ok
        assert result.issues[0].kind is IssueKind.UNIQUENESS_VIOLATION

    def test_join_entity_keys(self, registry):
        assert validate("CandidatesOnJobsWhereUniqueInput", {"id": "c1"}).ok
        assert validate(
            "CandidatesOnJobsWhereUniqueInput",
            {"candidateId_jobId": {"candidateId": "c1", "jobId": "j1"}},
        ).ok
        assert validate(
            "ShortListedWhereUniqueInput",
            {"userId_jobId_candidateId": {"userId": "u1", "jobId": "j1", "candidateId": "c1"}},
        ).ok

    def test_null_does_not_select(self, registry):
        """A nullable unique column set to null identifies nothing."""
        assert validate("CandidateWhereUniqueInput", {"activeResumeId": "r1"}).ok
        result = validate("CandidateWhereUniqueInput", {"activeResumeId": None})
        assert result.issues[0].kind is IssueKind.UNIQUENESS_VIOLATION


class TestOrderBy:
    """Test ordering inputs."""

    def test_direction(self, registry):
        result = validate("UserOrderByWithRelationInput", {"createdAt": "desc"})
        assert result.value.createdAt is SortOrder.DESC

    def test_nulls_placement_on_nullable_column(self, registry):
        assert validate(
            "UserOrderByWithRelationInput", {"clientId": {"sort": "asc", "nulls": "last"}}
        ).ok
        assert not validate("UserOrderByWithRelationInput", {"name": {"sort": "asc"}}).ok
        assert not validate("UserOrderByWithRelationInput", {"clientId": {"nulls": "first"}}).ok

    def test_unknown_direction(self, registry):
        result = validate("UserOrderByWithRelationInput", {"name": "up"})
        assert not result.ok
        assert result.issues[0].path == "name"

    def test_relations(self, registry):
        assert validate("UserOrderByWithRelationInput", {"profile": {"city": "asc"}}).ok
        assert validate("UserOrderByWithRelationInput", {"jobs": {"_count": "desc"}}).ok
        assert not validate("UserOrderByWithRelationInput", {"jobs": {"title": "asc"}}).ok

    def test_json_columns_not_orderable(self, registry):
        assert not validate("CandidateOrderByWithRelationInput", {"skills": "asc"}).ok

    def test_aggregation(self, registry):
        result = validate("CandidateOrderByWithAggregationInput", {
            "gender": "asc",
            "_count": {"id": "desc"},
            "_avg": {"score": "desc"},
        })
        assert result.ok
        assert not validate("UserOrderByWithAggregationInput", {"_avg": {}}).ok


class TestScalarFieldEnum:
    """Test column name literals."""

    @pytest.mark.parametrize("value,valid", [
        ("email", True),
        ("password", True),
        ("clientId", True),
        ("profile", False),
        ("nickname", False),
    ])
    def test_user_columns(self, registry, value, valid):
        result = validate("UserScalarFieldEnum", value)
        assert result.ok is valid
        if valid:
            assert result.value == value


class TestFindArgs:
    """Test read operation arguments."""

    def test_find_many(self, registry):
        data = {
            "where": {"role": "ADMIN"},
            "orderBy": [{"createdAt": "desc"}, {"name": "asc"}],
            "take": 10,
            "skip": 20,
            "cursor": {"id": USER_ID},
            "distinct": ["email"],
        }
        result = validate("UserFindManyArgs", data)
        assert result.ok
        assert result.data["orderBy"] == [{"createdAt": "desc"}, {"name": "asc"}]

    def test_select_with_nested_arguments(self, registry):
        result = validate("UserFindManyArgs", {
            "select": {
                "id": True,
                "profile": {"select": {"city": True}},
                "jobs": {"where": {"title": {"contains": "Engineer"}}, "take": 5},
                "_count": {"select": {"jobs": True, "ownedResumes": True}},
            },
        })
        assert result.ok

    def test_include(self, registry):
        assert validate("DepartmentFindFirstArgs", {"include": {"jobs": True, "createdBy": True}}).ok
        assert not validate("DepartmentFindFirstArgs", {"include": {"title": True}}).ok

    def test_count_projection_only_on_to_many(self, registry):
        """Entities without to-many relations have no _count projection."""
        assert not validate("ProfileFindManyArgs", {"select": {"_count": True}}).ok

    def test_negative_skip(self, registry):
        result = validate("UserFindManyArgs", {"skip": -1})
        assert not result.ok
        assert result.issues[0].path == "skip"
        assert result.issues[0].kind is IssueKind.CONSTRAINT_VIOLATION

    def test_unknown_distinct_column(self, registry):
        assert not validate("UserFindManyArgs", {"distinct": "nickname"}).ok

    def test_find_unique_requires_where(self, registry):
        result = validate("UserFindUniqueArgs", {"select": {"id": True}})
        assert not result.ok
        assert result.issues[0].path == "where"
        assert result.issues[0].type == "missing"

    def test_find_unique_where_must_select(self, registry):
        result = validate("UserFindUniqueArgs", {"where": {"name": "Jane"}})
        assert result.issues[0].kind is IssueKind.UNIQUENESS_VIOLATION
        assert result.issues[0].path == "where"


class TestAggregateArgs:
    """Test aggregate, groupBy and count arguments."""

    def test_aggregate(self, registry):
        result = validate("CandidateAggregateArgs", {
            "where": {"gender": "FEMALE"},
            "_count": {"_all": True},
            "_avg": {"age": True, "score": True},
            "_sum": {"age": True},
            "_min": {"dob": True},
        })
        assert result.ok
        assert result.data["_count"] == {"_all": True}

    def test_no_numeric_aggregates_without_numbers(self, registry):
        assert not validate("UserAggregateArgs", {"_avg": {}}).ok

    def test_group_by(self, registry):
        result = validate("CandidateGroupByArgs", {
            "by": ["gender"],
            "having": {"score": {"_avg": {"gt": 0.5}}},
            "orderBy": {"_count": {"id": "desc"}},
            "_count": True,
        })
        assert result.ok

    def test_group_by_requires_columns(self, registry):
        result = validate("CandidateGroupByArgs", {"_count": True})
        assert result.issues[0].path == "by"

    @pytest.mark.parametrize("select", [True, {"_all": True, "email": True}])
    def test_count(self, registry, select):
        assert validate("UserCountArgs", {"select": select, "where": {"emailVerified": True}}).ok
