import pytest

from court_case_service.app.service.exceptions import ValidationError
from court_case_service.app.service.models import CaseStatus, Principal, Role
from court_case_service.app.service.queries.filters import (
    CaseListOptions, build_case_filter, build_sort, role_predicate, search_predicate,
)


def test_registrar_has_no_role_restriction():
    assert role_predicate(Principal(id="reg-1", role=Role.REGISTRAR)) == {}
    assert build_case_filter(Principal(id="reg-1", role=Role.REGISTRAR)) == {"is_active": True}


def test_judge_predicate_includes_unassigned_cases():
    assert role_predicate(Principal(id="judge-1", role=Role.JUDGE)) == {
        "$or": [{"assigned_judge": "judge-1"}, {"assigned_judge": None}]
    }


def test_lawyer_and_user_predicates():
    assert role_predicate(Principal(id="lawyer-1", role=Role.LAWYER)) == {"parties.assigned_lawyer_id": "lawyer-1"}
    assert role_predicate(Principal(id="user-1", role=Role.USER)) == {"parties.user_id": "user-1"}


def test_search_is_escaped_and_case_insensitive():
    predicate = search_predicate(" DC/2025 (a) ")

    assert len(predicate["$or"]) == 3
    for clause in predicate["$or"]:
        (condition,) = clause.values()
        assert condition == {"$regex": r"DC/2025\ \(a\)", "$options": "i"}


def test_judge_scope_and_search_are_separate_groups():
    options = CaseListOptions(search="boundary", status=CaseStatus.PENDING)

    query_filter = build_case_filter(Principal(id="judge-1", role=Role.JUDGE), options)

    assert query_filter["is_active"] is True
    assert query_filter["status"] == "pending"
    assert "$or" not in query_filter
    assert len(query_filter["$and"]) == 2
    assert query_filter["$and"][0] == role_predicate(Principal(id="judge-1", role=Role.JUDGE))


def test_blank_search_is_ignored():
    query_filter = build_case_filter(Principal(id="reg-1", role=Role.REGISTRAR), CaseListOptions(search="   "))

    assert "$and" not in query_filter


def test_build_sort():
    assert build_sort(CaseListOptions()) == ("registration_date", -1)
    assert build_sort(CaseListOptions(sort_by="title", sort_order="ASC")) == ("title", 1)


@pytest.mark.parametrize("options", [
    CaseListOptions(sort_by="description"),
    CaseListOptions(sort_order="sideways"),
])
def test_build_sort_rejects_unknown_values(options):
    with pytest.raises(ValidationError):
        build_sort(options)
