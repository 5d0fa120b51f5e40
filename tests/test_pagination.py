from __future__ import annotations

import pytest

from src.campus_admin.campus_admin.common.pagination import Page, PageRequest, paginate, parse_page_request
from src.campus_admin.campus_admin.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from src.campus_admin.campus_admin.core.exceptions import ValidationError


def test_defaults():
    req = parse_page_request({}, allowed_sort=("name",))
    assert req == PageRequest(page=1, limit=DEFAULT_PAGE_SIZE)


def test_sort_with_descending_prefix():
    req = parse_page_request({"sort": "-name", "page": "2", "limit": "10"}, allowed_sort=("name",))
    assert (req.sort, req.descending, req.offset) == ("name", True, 10)


def test_limit_is_capped():
    assert parse_page_request({"limit": "5000"}, allowed_sort=()).limit == MAX_PAGE_SIZE


@pytest.mark.parametrize("args", [{"page": "0"}, {"limit": "-1"}, {"page": "abc"}, {"sort": "password_hash"}])
def test_bad_arguments_are_rejected(args):
    with pytest.raises(ValidationError):
        parse_page_request(args, allowed_sort=("name",))


def test_meta_links():
    page = paginate(list(range(25)), PageRequest(page=2, limit=10))
    assert page.items == list(range(10, 20))
    assert page.meta() == {
        "page": 2,
        "limit": 10,
        "total": 25,
        "next": {"page": 3, "limit": 10},
        "prev": {"page": 1, "limit": 10},
    }


def test_last_page_has_no_next():
    meta = Page(items=[1], total=1, request=PageRequest(page=1, limit=10)).meta()
    assert "next" not in meta
    assert "prev" not in meta
