"""
Tests for `domain/staleness.py`.

Covers contract rules:
- Bucket boundaries are inclusive upper bounds on fractional days.
- Negative day counts raise errors.
- Staleness is measured from last contact, or from creation when never contacted.
- All timestamps passed to ContactAge must be UTC timezone-aware.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from domain.staleness import ContactAge, StalenessBucket


@pytest.mark.parametrize(
    "days, expected",
    [
        (0, StalenessBucket.GREEN),
        (2, StalenessBucket.GREEN),
        (2.01, StalenessBucket.YELLOW),
        (5, StalenessBucket.YELLOW),
        (5.5, StalenessBucket.ORANGE),
        (12, StalenessBucket.ORANGE),
        (13, StalenessBucket.RED),
        (20, StalenessBucket.RED),
        (20.1, StalenessBucket.BLACK),
        (365, StalenessBucket.BLACK),
    ],
)
def test_staleness_for_days_boundaries(days: float, expected: StalenessBucket) -> None:
    """Verify days -> bucket mapping at and just past each boundary."""

    assert StalenessBucket.for_days(days) == expected


def test_staleness_for_days_negative_raises() -> None:
    with pytest.raises(ValueError):
        StalenessBucket.for_days(-0.5)


def test_contact_age_uses_last_contacted_when_present() -> None:
    """Verify a recent contact resets staleness regardless of creation time."""

    created = datetime(2025, 1, 1, tzinfo=timezone.utc)
    contacted = datetime(2025, 1, 20, tzinfo=timezone.utc)
    as_of = datetime(2025, 1, 21, tzinfo=timezone.utc)

    age = ContactAge(created_at=created, last_contacted=contacted, as_of=as_of)

    assert age.days() == 1
    assert age.bucket() == StalenessBucket.GREEN


def test_contact_age_falls_back_to_created_at() -> None:
    created = datetime(2025, 1, 1, tzinfo=timezone.utc)
    as_of = created + timedelta(days=6)

    age = ContactAge(created_at=created, last_contacted=None, as_of=as_of)

    assert age.bucket() == StalenessBucket.ORANGE


def test_contact_age_partial_day_past_boundary_is_next_bucket() -> None:
    """Verify days are fractional: 2 days and 1 hour is already yellow."""

    created = datetime(2025, 1, 1, tzinfo=timezone.utc)
    age = ContactAge(created_at=created, last_contacted=None, as_of=created + timedelta(days=2, hours=1))

    assert age.bucket() == StalenessBucket.YELLOW


def test_contact_age_requires_utc_as_of() -> None:
    created = datetime(2025, 1, 1, tzinfo=timezone.utc)

    with pytest.raises(ValueError):
        ContactAge(created_at=created, last_contacted=None, as_of=datetime(2025, 1, 2)).days()

    with pytest.raises(ValueError):
        ContactAge(
            created_at=created,
            last_contacted=None,
            as_of=datetime(2025, 1, 2, tzinfo=timezone(timedelta(hours=1))),
        ).days()


def test_contact_age_in_the_future_raises() -> None:
    """Verify a last-contact time after as_of is rejected."""

    as_of = datetime(2025, 1, 1, tzinfo=timezone.utc)
    age = ContactAge(created_at=as_of, last_contacted=as_of + timedelta(hours=1), as_of=as_of)

    with pytest.raises(ValueError):
        age.bucket()
