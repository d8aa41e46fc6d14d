"""Tests for database models."""

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time
from sqlalchemy import select

from artfolio.models import ArtistInvitation, Gallery, GalleryItem, InvitationStatus, User
from artfolio.models.invitation import generate_invitation_token
from artfolio.models.user import UserRole


@pytest.fixture
def user_fixture(db_session) -> User:
    user = User(email="artist@example.com", password_hash="hash", slug="artist")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def gallery_fixture(db_session, user_fixture: User) -> Gallery:
    gallery = Gallery(owner=user_fixture, name="Sketches", slug="sketches")
    db_session.add(gallery)
    db_session.commit()
    return gallery


def test_user_defaults(user_fixture: User):
    assert user_fixture.role == UserRole.ARTIST.value
    assert not user_fixture.is_admin
    assert not user_fixture.is_superadmin
    assert user_fixture.created_at is not None


@pytest.mark.parametrize(
    "role, is_admin, is_superadmin",
    [
        (UserRole.ARTIST.value, False, False),
        (UserRole.ADMIN.value, True, False),
        (UserRole.SUPERADMIN.value, True, True),
    ],
)
def test_user_role_flags(role, is_admin, is_superadmin):
    user = User(email="x@example.com", password_hash="hash", role=role)
    assert user.is_admin is is_admin
    assert user.is_superadmin is is_superadmin


def test_gallery_defaults(gallery_fixture: Gallery):
    assert gallery_fixture.is_public is True
    assert gallery_fixture.view_count == 0
    assert gallery_fixture.featured_item_id is None
    assert str(gallery_fixture) == "Sketches (sketches)"


def test_deleting_gallery_removes_items(db_session, gallery_fixture: Gallery):
    item = GalleryItem(gallery=gallery_fixture, title="Fox", image_url="https://cdn.example.com/fox.png")
    db_session.add(item)
    db_session.commit()
    item_id = item.id

    db_session.delete(gallery_fixture)
    db_session.commit()

    assert db_session.execute(select(GalleryItem).where(GalleryItem.id == item_id)).scalar_one_or_none() is None


def test_item_defaults(db_session, gallery_fixture: Gallery):
    item = GalleryItem(gallery=gallery_fixture, title="Fox", image_url="https://cdn.example.com/fox.png")
    db_session.add(item)
    db_session.commit()

    assert item.is_original_work is True
    assert item.position is None
    assert item.tags is None


class TestInvitation:
    def test_defaults(self, db_session):
        with freeze_time("2026-10-17 12:00:00"):
            invitation = ArtistInvitation(email="new@example.com")
            db_session.add(invitation)
            db_session.commit()

            assert invitation.status == InvitationStatus.PENDING
            assert len(invitation.token) >= 32
            assert invitation.expires_at_utc == datetime(2026, 10, 24, 12, 0, tzinfo=UTC)
            assert invitation.days_remaining == 7
            assert not invitation.is_expired

    def test_tokens_are_unique(self):
        tokens = {generate_invitation_token() for _ in range(20)}
        assert len(tokens) == 20

    def test_partial_day_rounds_up(self):
        invitation = ArtistInvitation(email="a@example.com", expires_at=datetime.now(UTC) + timedelta(hours=30))
        assert invitation.days_remaining == 2

    def test_expired(self):
        invitation = ArtistInvitation(email="a@example.com", expires_at=datetime.now(UTC) - timedelta(minutes=1))
        assert invitation.is_expired
        assert invitation.days_remaining == 0

    def test_naive_expiry_is_treated_as_utc(self):
        naive = (datetime.now(UTC) + timedelta(days=2)).replace(tzinfo=None)
        invitation = ArtistInvitation(email="a@example.com", expires_at=naive)
        assert invitation.expires_at_utc.tzinfo is UTC
        assert not invitation.is_expired
