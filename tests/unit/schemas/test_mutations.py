"""
Tests for create/update inputs, nested relation writes and the checked vs
unchecked equivalence.
"""

import pytest

from core.errors import IssueKind
from schemas import DbNull, Increment, JsonNull, Set, as_operation, foreign_key_assignments, validate


USER_ID = "3f2b8c1e-9a4d-4c7e-8b1f-2d6e5a7c9b0d"
DEPARTMENT_ID = "0b7f2d9e-1c3a-4e5b-8d6f-7a9c0e1b2d3f"
JOB_ID = "5e8a1f3c-2b4d-4a6e-9c8f-0d1e2f3a4b5c"


def _issue_types(result, path):
    return {issue.type for issue in result.issues_at(path)}


class TestCheckedCreate:
    """Test relation-based create inputs."""

    def test_connect_owning_relation(self, registry):
        result = validate("ProfileCreateInput", {
            "firstName": "Jane",
            "user": {"connect": {"id": USER_ID}},
        })
        assert result.ok

    def test_owning_required_relation_must_be_given(self, registry):
        result = validate("ProfileCreateInput", {"firstName": "Jane"})
        assert _issue_types(result, "user") == {"missing"}

    def test_foreign_key_column_rejected(self, registry):
        result = validate("ProfileCreateInput", {
            "firstName": "Jane",
            "userId": USER_ID,
            "user": {"connect": {"id": USER_ID}},
        })
        assert _issue_types(result, "userId") == {"extra_forbidden"}

    def test_generated_fields_optional(self, registry, candidate_create_payload):
        result = validate("CandidateCreateInput", candidate_create_payload)
        assert result.ok
        assert "id" not in result.data

    def test_required_field(self, registry, candidate_create_payload):
        del candidate_create_payload["name"]
        result = validate("CandidateCreateInput", candidate_create_payload)
        assert [issue.path for issue in result.issues] == ["name"]


class TestUncheckedCreate:
    """Test foreign-key-based create inputs."""

    def test_foreign_key_columns(self, registry):
        result = validate("ProfileUncheckedCreateInput", {"firstName": "Jane", "userId": USER_ID})
        assert result.ok

    def test_owning_relation_not_accepted(self, registry):
        result = validate("ProfileUncheckedCreateInput", {
            "firstName": "Jane",
            "userId": USER_ID,
            "user": {"connect": {"id": USER_ID}},
        })
        assert _issue_types(result, "user") == {"extra_forbidden"}

    def test_inverse_relations_kept(self, registry):
        """Relations owned by the other side can still be written."""
        result = validate("DepartmentUncheckedCreateInput", {
            "title": "Engineering",
            "createdById": USER_ID,
            "jobs": {"create": {"title": "Backend Engineer", "createdById": USER_ID}},
        })
        assert result.ok


class TestEquivalence:
    """Checked and unchecked forms of one write set the same foreign keys."""

    @pytest.mark.parametrize("entity,checked,unchecked", [
        (
            "Profile",
            {"firstName": "Jane", "user": {"connect": {"id": USER_ID}}},
            {"firstName": "Jane", "userId": USER_ID},
        ),
        (
            "Job",
            {
                "title": "Backend Engineer",
                "department": {"connect": {"id": DEPARTMENT_ID}},
                "createdBy": {"connect": {"id": USER_ID}},
            },
            {"title": "Backend Engineer", "departmentId": DEPARTMENT_ID, "createdById": USER_ID},
        ),
    ])
    def test_same_foreign_keys(self, registry, entities, entity, checked, unchecked):
        checked_result = validate(f"{entity}CreateInput", checked)
        unchecked_result = validate(f"{entity}UncheckedCreateInput", unchecked)
        assert checked_result.ok and unchecked_result.ok

        descriptor = entities[entity]
        expected = {key: value for key, value in unchecked.items() if key in descriptor.owned_foreign_keys}
        assert foreign_key_assignments(descriptor, checked_result.value) == expected
        assert foreign_key_assignments(descriptor, unchecked_result.data) == expected


class TestNestedCreate:
    """Test nested relation envelopes on create."""

    def test_create_without_back_relation(self, registry):
        """Jobs created through a department do not name the department."""
        result = validate("DepartmentCreateInput", {
            "title": "Engineering",
            "createdBy": {"connect": {"id": USER_ID}},
            "jobs": {
                "create": [
                    {"title": "Backend Engineer", "createdBy": {"connect": {"id": USER_ID}}},
                    {"title": "Frontend Engineer", "createdById": USER_ID},
                ],
            },
        })
        assert result.ok

    def test_back_relation_rejected(self, registry):
        result = validate("DepartmentCreateInput", {
            "title": "Engineering",
            "createdBy": {"connect": {"id": USER_ID}},
            "jobs": {"create": {"title": "Backend Engineer", "departmentId": DEPARTMENT_ID, "createdById": USER_ID}},
        })
        assert not result.ok

    def test_create_many(self, registry):
        result = validate("DepartmentCreateInput", {
            "title": "Engineering",
            "createdBy": {"connect": {"id": USER_ID}},
            "jobs": {
                "createMany": {
                    "data": [{"title": "A", "createdById": USER_ID}, {"title": "B", "createdById": USER_ID}],
                    "skipDuplicates": True,
                },
            },
        })
        assert result.ok

    def test_connect_or_create(self, registry):
        result = validate("UserCreateInput", {
            "name": "Jane",
            "email": "jane@acme.io",
            "phone": "+14155550123",
            "password": "s3cretpw",
            "profile": {
                "connectOrCreate": {"where": {"userId": USER_ID}, "create": {"firstName": "Jane"}},
            },
        })
        assert result.ok

    def test_nested_rules_reported_with_path(self, registry):
        result = validate("DepartmentCreateInput", {
            "title": "Engineering",
            "createdBy": {
                "create": {"name": "Jane", "email": "jane@acme.io", "phone": "12345", "password": "s3cretpw"},
            },
        })
        assert not result.ok
        assert any(
            issue.path == "createdBy.create.phone" and issue.message == "Phone number is invalid"
            for issue in result.issues
        )

    def test_create_many_args(self, registry):
        user = {"name": "Jane", "email": "jane@acme.io", "phone": "+14155550123", "password": "s3cretpw"}
        result = validate("UserCreateManyArgs", {"data": [user, {**user, "email": "john@acme.io"}], "skipDuplicates": True})
        assert result.ok
        assert len(result.data["data"]) == 2


class TestUpdate:
    """Test update values and operation envelopes."""

    def test_bare_value_and_operation(self, registry):
        result = validate("CandidateUpdateInput", {"name": "Ada", "age": {"increment": 1}})
        assert result.ok
        assert as_operation(result.value.name) == Set("Ada")
        assert as_operation(result.value.age) == Increment(1)

    def test_nullable_set(self, registry):
        result = validate("CandidateUpdateInput", {"email": {"set": None}, "age": None})
        assert result.ok
        assert as_operation(result.value.email) == Set(None)
        assert as_operation(result.value.age) == Set(None)

    @pytest.mark.parametrize("envelope", [{}, {"increment": 1, "decrement": 2}])
    def test_exactly_one_operation(self, registry, envelope):
        result = validate("CandidateUpdateInput", {"age": envelope})
        assert not result.ok
        assert "field_operation" in _issue_types(result, "age")
        operation_issue = next(i for i in result.issues_at("age") if i.type == "field_operation")
        assert operation_issue.kind is IssueKind.SHAPE_VIOLATION

    def test_numeric_operations_only_on_numbers(self, registry):
        assert not validate("CandidateUpdateInput", {"name": {"increment": 1}}).ok

    def test_rules_apply_to_bare_values(self, registry):
        result = validate("CandidateUpdateInput", {"phone": "12345"})
        assert not result.ok
        messages = [issue.message for issue in result.issues_at("phone")]
        assert "Phone number is invalid" in messages

    def test_update_many_mutation_has_no_relations(self, registry):
        assert validate("JobUpdateManyMutationInput", {"location": "Remote"}).ok
        assert not validate("JobUpdateManyMutationInput", {"department": {}}).ok

    def test_unchecked_update_many_takes_foreign_keys(self, registry):
        assert validate("JobUncheckedUpdateManyInput", {"departmentId": DEPARTMENT_ID}).ok
        assert not validate("JobUpdateManyMutationInput", {"departmentId": DEPARTMENT_ID}).ok


class TestNestedUpdate:
    """Test nested relation envelopes on update."""

    def test_to_many_operations(self, registry):
        result = validate("DepartmentUpdateInput", {
            "jobs": {
                "updateMany": {"where": {"location": None}, "data": {"location": "Remote"}},
                "deleteMany": [{"title": {"startsWith": "Old"}}],
                "set": [{"id": JOB_ID}],
                "disconnect": {"id": JOB_ID},
                "update": {"where": {"id": JOB_ID}, "data": {"title": "Staff Engineer"}},
                "upsert": {
                    "where": {"id": JOB_ID},
                    "update": {"title": "Staff Engineer"},
                    "create": {"title": "Staff Engineer", "createdById": USER_ID},
                },
            },
        })
        assert result.ok

    def test_optional_to_one_disconnect(self, registry):
        assert validate("ResumeUpdateInput", {"candidate": {"disconnect": True}}).ok
        assert validate("ResumeUpdateInput", {"createdBy": {"delete": {"name": "Jane"}}}).ok

    def test_required_to_one_cannot_disconnect(self, registry):
        result = validate("JobUpdateInput", {"department": {"disconnect": True}})
        assert _issue_types(result, "department.disconnect") == {"extra_forbidden"}

    def test_required_to_one_update(self, registry):
        assert validate("JobUpdateInput", {
            "department": {"update": {"data": {"title": "Platform"}}},
        }).ok
        assert validate("JobUpdateInput", {"department": {"update": {"title": "Platform"}}}).ok

    def test_inverse_to_one_upsert(self, registry):
        result = validate("UserUpdateInput", {
            "profile": {"upsert": {"create": {"firstName": "Jane"}, "update": {"city": "Paris"}}},
        })
        assert result.ok


class TestJsonWrites:
    """Test JSON columns in create/update inputs."""

    @pytest.mark.parametrize("value,expected", [
        ("DbNull", DbNull),
        ("JsonNull", JsonNull),
        (["python", None], ["python", None]),
        ({"years": 3}, {"years": 3}),
    ])
    def test_create(self, registry, candidate_create_payload, value, expected):
        result = validate("CandidateCreateInput", {**candidate_create_payload, "skills": value})
        assert result.ok
        assert result.value.skills == expected

    def test_bare_null_rejected(self, registry, candidate_create_payload):
        """Callers must say which null they mean."""
        result = validate("CandidateCreateInput", {**candidate_create_payload, "skills": None})
        assert not result.ok
        assert result.issues[0].path == "skills"

    def test_update(self, registry):
        result = validate("CandidateUpdateInput", {"pros": "JsonNull", "cons": "DbNull"})
        assert result.value.pros is JsonNull
        assert result.value.cons is DbNull
