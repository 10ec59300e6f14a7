"""Favorites service: idempotent add, validation, removal, sorting and paging."""

import math
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import Text
from sqlalchemy.exc import IntegrityError

from jobfinder.exceptions import AlreadyExists, NotFound, Unauthorized, ValidationError
from jobfinder.models import FavoriteJob
from jobfinder.services import favorites_service

from conftest import make_payload


async def _all_job_ids(db, user_id, sort_by="savedAt", order="desc"):
    result = await favorites_service.list_favorites(db, user_id, page_size=100, sort_by=sort_by, order=order)
    return [f.job_id for f in result.items]


async def test_add_favorite_stores_trimmed_fields(db, user):
    favorite = await favorites_service.add_favorite(
        db, user.id, make_payload("job-1", title="  Data Engineer ", company=" Globex ", companyLogo="")
    )

    assert favorite.job_id == "job-1"
    assert favorite.title == "Data Engineer"
    assert favorite.company == "Globex"
    assert favorite.company_logo is None
    assert favorite.saved_at is not None
    assert await favorites_service.count_favorites(db, user.id) == 1


async def test_add_favorite_defaults_optional_fields(db, user):
    favorite = await favorites_service.add_favorite(
        db, user.id, make_payload("job-1", description=None, salary=None)
    )

    assert favorite.description == ""
    assert favorite.salary == ""


async def test_add_favorite_twice_keeps_one_entry(db, user):
    first = await favorites_service.add_favorite(db, user.id, make_payload("job-123"))

    with pytest.raises(AlreadyExists) as exc_info:
        await favorites_service.add_favorite(db, user.id, make_payload("job-123", title="Other title"))

    assert exc_info.value.existing.id == first.id
    assert exc_info.value.existing.title == "Backend Engineer"
    assert await favorites_service.count_favorites(db, user.id) == 1


async def test_duplicate_is_reported_before_missing_fields(db, user):
    await favorites_service.add_favorite(db, user.id, make_payload("job-123"))

    with pytest.raises(AlreadyExists):
        await favorites_service.add_favorite(db, user.id, make_payload("job-123", title=None, company=None))


async def test_add_favorite_names_every_missing_field(db, user):
    payload = make_payload("job-1", title="   ", company=None, applyLink="")

    with pytest.raises(ValidationError) as exc_info:
        await favorites_service.add_favorite(db, user.id, payload)

    assert exc_info.value.fields == ["title", "company", "applyLink"]
    assert "title" in exc_info.value.message
    assert await favorites_service.count_favorites(db, user.id) == 0


async def test_add_favorite_without_id_is_rejected(db, user):
    with pytest.raises(ValidationError) as exc_info:
        await favorites_service.add_favorite(db, user.id, make_payload(None))

    assert exc_info.value.fields == ["id"]


async def test_same_job_can_be_saved_by_different_users(db, user, other_user):
    await favorites_service.add_favorite(db, user.id, make_payload("job-123"))
    await favorites_service.add_favorite(db, other_user.id, make_payload("job-123"))

    assert await favorites_service.favorite_job_ids(db, user.id) == {"job-123"}
    assert await favorites_service.favorite_job_ids(db, other_user.id) == {"job-123"}


async def test_remove_favorite_returns_removed_entry(db, user):
    await favorites_service.add_favorite(db, user.id, make_payload("job-1"))
    await favorites_service.add_favorite(db, user.id, make_payload("job-2"))

    removed = await favorites_service.remove_favorite(db, user.id, "job-1")

    assert removed.job_id == "job-1"
    assert await favorites_service.favorite_job_ids(db, user.id) == {"job-2"}


async def test_remove_missing_favorite_leaves_list_unchanged(db, user):
    await favorites_service.add_favorite(db, user.id, make_payload("job-1"))
    before = await _all_job_ids(db, user.id)

    with pytest.raises(NotFound):
        await favorites_service.remove_favorite(db, user.id, "job-404")

    assert await _all_job_ids(db, user.id) == before


@pytest.mark.parametrize("job_id", [None, "", "   "])
async def test_remove_requires_job_id(db, user, job_id):
    with pytest.raises(ValidationError) as exc_info:
        await favorites_service.remove_favorite(db, user.id, job_id)

    assert exc_info.value.fields == ["jobId"]


async def test_readding_after_removal_creates_fresh_entry(db, user):
    first = await favorites_service.add_favorite(db, user.id, make_payload("job-1"))
    first_saved_at = first.saved_at
    await favorites_service.add_favorite(db, user.id, make_payload("job-2"))
    await favorites_service.remove_favorite(db, user.id, "job-1")

    second = await favorites_service.add_favorite(db, user.id, make_payload("job-1"))

    assert second.saved_at >= first_saved_at
    # Equal titles fall back to insertion order, so the re-added job comes last
    assert await _all_job_ids(db, user.id, "title", "asc") == ["job-2", "job-1"]


async def test_operations_require_a_caller(db):
    with pytest.raises(Unauthorized):
        await favorites_service.list_favorites(db, None)
    with pytest.raises(Unauthorized):
        await favorites_service.add_favorite(db, None, make_payload())
    with pytest.raises(Unauthorized):
        await favorites_service.remove_favorite(db, None, "job-1")


async def test_unknown_user_is_not_found(db):
    with pytest.raises(NotFound):
        await favorites_service.list_favorites(db, uuid.uuid4())
    with pytest.raises(NotFound):
        await favorites_service.add_favorite(db, uuid.uuid4(), make_payload())


async def test_storage_rejects_duplicate_rows(db, user):
    for _ in range(2):
        db.add(FavoriteJob(
            user_id=user.id, job_id="job-1", title="t", company="c", location="l",
            employment_type="FULLTIME", apply_link="#",
        ))

    with pytest.raises(IntegrityError):
        await db.flush()


async def test_concurrent_add_resolves_to_already_exists(db, user, monkeypatch):
    await favorites_service.add_favorite(db, user.id, make_payload("job-1"))
    await db.commit()

    real_find = favorites_service._find_favorite
    calls = []

    async def find_after_other_request(session, user_id, job_id):
        # The first lookup happens before the competing insert becomes visible
        calls.append(job_id)
        if len(calls) == 1:
            return None
        return await real_find(session, user_id, job_id)

    monkeypatch.setattr(favorites_service, "_find_favorite", find_after_other_request)

    with pytest.raises(AlreadyExists) as exc_info:
        await favorites_service.add_favorite(db, user.id, make_payload("job-1"))

    assert exc_info.value.existing.job_id == "job-1"
    assert len(calls) == 2
    assert await favorites_service.count_favorites(db, user.id) == 1


# Inserted in this order; titles, companies and timestamps repeat to force ties
SORT_FIXTURE = [
    ("job-a", "Zeta Engineer", "beta corp", 3),
    ("job-b", "alpha analyst", "Acme", 1),
    ("job-c", "Alpha Analyst", "acme", 3),
    ("job-d", "middle manager", "Beta Corp", 2),
    ("job-e", "Zeta engineer", "Delta", 1),
    ("job-f", "Gamma Ops", "acme", 2),
    ("job-g", "alpha analyst", "Omega", 3),
]


@pytest.fixture
async def sorted_favorites(db, user):
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    rows = []
    for job_id, title, company, day in SORT_FIXTURE:
        row = FavoriteJob(
            user_id=user.id, job_id=job_id, title=title, company=company, location="Remote",
            employment_type="FULLTIME", apply_link="#", saved_at=base + timedelta(days=day),
        )
        db.add(row)
        await db.flush()
        rows.append((job_id, title.lower(), company.lower(), day))
    await db.commit()
    return rows


@pytest.mark.parametrize("sort_by,position", [("savedAt", 3), ("title", 1), ("company", 2)])
@pytest.mark.parametrize("order", ["asc", "desc"])
async def test_sort_order_breaks_ties_by_insertion(db, user, sorted_favorites, sort_by, position, order):
    # sorted() is stable, so equal keys keep insertion order in both directions
    if order == "asc":
        expected = sorted(sorted_favorites, key=lambda row: row[position])
    else:
        groups = sorted({row[position] for row in sorted_favorites}, reverse=True)
        expected = [row for key in groups for row in sorted_favorites if row[position] == key]

    assert await _all_job_ids(db, user.id, sort_by, order) == [row[0] for row in expected]


@pytest.mark.parametrize("page_size", [1, 2, 3, 5, 7, 10])
async def test_pages_concatenate_to_full_list(db, user, sorted_favorites, page_size):
    full = await _all_job_ids(db, user.id, "title", "asc")

    collected = []
    page = 1
    while True:
        result = await favorites_service.list_favorites(
            db, user.id, page=page, page_size=page_size, sort_by="title", order="asc"
        )
        collected.extend(f.job_id for f in result.items)
        assert result.pagination.total_pages == math.ceil(len(full) / page_size)
        if not result.pagination.has_next_page:
            break
        page += 1

    assert collected == full


async def test_pagination_metadata(db, user, sorted_favorites):
    result = await favorites_service.list_favorites(db, user.id, page=4, page_size=2)

    assert len(result.items) == 1
    assert result.pagination.current_page == 4
    assert result.pagination.total_pages == 4
    assert result.pagination.total_items == 7
    assert result.pagination.items_per_page == 2
    assert result.pagination.has_next_page is False
    assert result.pagination.has_prev_page is True


async def test_page_past_the_end_is_empty(db, user, sorted_favorites):
    result = await favorites_service.list_favorites(db, user.id, page=9, page_size=2)

    assert result.items == []
    assert result.pagination.has_next_page is False


async def test_empty_list_has_zero_pages(db, user):
    result = await favorites_service.list_favorites(db, user.id)

    assert result.items == []
    assert result.pagination.total_pages == 0
    assert result.pagination.has_prev_page is False


@pytest.mark.parametrize("kwargs,field", [
    ({"page": 0}, "page"),
    ({"page_size": 0}, "limit"),
    ({"sort_by": "salary"}, "sortBy"),
    ({"order": "sideways"}, "order"),
])
async def test_list_rejects_bad_arguments(db, user, kwargs, field):
    with pytest.raises(ValidationError) as exc_info:
        await favorites_service.list_favorites(db, user.id, **kwargs)

    assert exc_info.value.fields == [field]


async def test_large_page_size_is_accepted(db, user, sorted_favorites):
    result = await favorites_service.list_favorites(db, user.id, page_size=500)

    assert len(result.items) == 7
    assert result.pagination.total_pages == 1


async def test_remove_matches_trimmed_job_id(db, user):
    await favorites_service.add_favorite(db, user.id, make_payload(" job-1 "))

    removed = await favorites_service.remove_favorite(db, user.id, "  job-1\t")

    assert removed.job_id == "job-1"
    assert await favorites_service.count_favorites(db, user.id) == 0


async def test_long_upstream_text_is_stored_whole(db, user):
    long_company = "Very Long Company Name " * 40
    long_location = "Somewhere, " * 60

    favorite = await favorites_service.add_favorite(
        db, user.id, make_payload("job-1", company=long_company, location=long_location, employmentType="X" * 80)
    )
    await db.commit()

    assert favorite.company == long_company.strip()
    assert favorite.location == long_location.strip()
    for column in ("title", "company", "location", "employment_type", "salary"):
        assert isinstance(FavoriteJob.__table__.c[column].type, Text)
