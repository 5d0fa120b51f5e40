from __future__ import annotations

from datetime import date

import pytest

from fakes import ADMIN, as_faculty, as_student, seed_faculty
from src.campus_admin.campus_admin.core.enums import Term
from src.campus_admin.campus_admin.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError


def _year(label="2024-2025", **overrides):
    data = {
        "label": label,
        "start_date": "2024-08-01",
        "end_date": "2025-06-30",
        "terms": [
            {"name": "Spring", "start_date": "2025-01-10", "end_date": "2025-05-20"},
            {"name": "Fall", "start_date": "2024-08-20", "end_date": "2024-12-15"},
        ],
    }
    data.update(overrides)
    return data


def test_department_codes_are_unique_and_uppercased(repos, container):
    head = seed_faculty(repos, "D100")
    dept = container.department_service.create_department(
        requester=ADMIN, data={"name": "Computer Science", "code": "cs", "head_faculty_id": head}
    )
    assert dept.code == "CS"
    assert dept.head_faculty_id == head

    with pytest.raises(ConflictError):
        container.department_service.create_department(requester=ADMIN, data={"name": "Other", "code": "CS"})


def test_department_head_must_exist(container):
    with pytest.raises(NotFoundError):
        container.department_service.create_department(
            requester=ADMIN, data={"name": "Maths", "code": "MA", "head_faculty_id": 99}
        )


def test_departments_readable_by_all_writable_by_admin(container):
    container.department_service.create_department(requester=ADMIN, data={"name": "Physics", "code": "PH"})
    assert [d.code for d in container.department_service.list_departments(requester=as_student(1))] == ["PH"]
    with pytest.raises(AuthorizationError):
        container.department_service.create_department(requester=as_faculty(1), data={"name": "X", "code": "X"})


def test_academic_year_terms_are_sorted_and_validated(container):
    year = container.academic_year_service.create_year(requester=ADMIN, data=_year())
    assert [t.name for t in year.terms] == [Term.FALL, Term.SPRING]
    assert year.terms[0].start_date == date(2024, 8, 20)


@pytest.mark.parametrize(
    "overrides",
    [
        {"end_date": "2024-07-01"},
        {"terms": [{"name": "Fall", "start_date": "2024-07-01", "end_date": "2024-12-15"}]},
        {
            "terms": [
                {"name": "Fall", "start_date": "2024-08-20", "end_date": "2024-12-15"},
                {"name": "Fall", "start_date": "2025-01-10", "end_date": "2025-05-20"},
            ]
        },
        {"terms": [{"name": "Monsoon", "start_date": "2024-08-20", "end_date": "2024-12-15"}]},
    ],
)
def test_invalid_academic_years_are_rejected(container, overrides):
    with pytest.raises(ValidationError):
        container.academic_year_service.create_year(requester=ADMIN, data=_year(**overrides))


def test_only_one_current_year(container):
    service = container.academic_year_service
    with pytest.raises(NotFoundError):
        service.current_year(requester=ADMIN)

    first = service.create_year(requester=ADMIN, data=_year(is_current=True))
    second = service.create_year(
        requester=ADMIN,
        data=_year("2025-2026", start_date="2025-08-01", end_date="2026-06-30", terms=[], is_current=True),
    )

    assert service.current_year(requester=as_student(1)).academic_year_id == second.academic_year_id
    assert service.get_year(requester=ADMIN, academic_year_id=first.academic_year_id).is_current is False


def test_duplicate_year_label_is_conflict(container):
    container.academic_year_service.create_year(requester=ADMIN, data=_year())
    with pytest.raises(ConflictError):
        container.academic_year_service.create_year(requester=ADMIN, data=_year())
