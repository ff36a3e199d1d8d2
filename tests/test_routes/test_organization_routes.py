"""
Tests for the organization blueprint routes.

Covers create, destroy, update, add_member and remove_member as seen
by the organization admin and by other signed-in users.  Non-admin
requests must leave the database untouched and answer with a redirect
rather than an error page.
"""

import pytest

from orgboard.extensions import db
from orgboard.models.audit import AuditLog
from orgboard.models.organization import Organization
from orgboard.models.user import User
from orgboard.services import organization_service


def _reload(model, pk):
    """Fetch a fresh copy of a row, discarding anything cached in the session."""
    db.session.expire_all()
    return db.session.get(model, pk)


def _member_ids(organization_id):
    organization = _reload(Organization, organization_id)
    return [member.id for member in organization.members.all()]


class TestCreate:
    """POST /organizations/"""

    @pytest.fixture(autouse=True)
    def _setup(self, user, login):
        self.user = user
        login(user)

    def test_increases_organization_count(self, client):
        """Creating an organization adds exactly one row."""
        before = Organization.query.count()
        client.post("/organizations/", data={"name": "orga", "homesite_url": ""})
        assert Organization.query.count() == before + 1

    def test_assigns_current_user_as_admin(self, client):
        """The creator becomes the organization admin."""
        client.post("/organizations/", data={"name": "orga"})
        organization = Organization.query.filter_by(name="orga").one()
        assert organization.admin_id == self.user.id

    def test_assigns_current_user_as_only_member(self, client):
        """The creator is the first and only member."""
        client.post("/organizations/", data={"name": "orga"})
        organization = Organization.query.filter_by(name="orga").one()
        assert organization.members.all() == [self.user]

    def test_redirects_to_new_organization(self, client):
        """A successful create redirects to the organization page."""
        response = client.post("/organizations/", data={"name": "orga"})
        organization = Organization.query.filter_by(name="orga").one()
        assert response.status_code == 302
        assert response.headers["Location"].endswith(
            f"/organizations/{organization.id}"
        )

    def test_stores_homesite_url(self, client):
        """A homesite URL is stored as given."""
        client.post(
            "/organizations/", data={"name": "orga", "homesite_url": "orga.example"}
        )
        organization = Organization.query.filter_by(name="orga").one()
        assert organization.homesite_url == "orga.example"

    def test_blank_name_creates_nothing(self, client):
        """A blank name re-renders the form and creates no row."""
        response = client.post("/organizations/", data={"name": "   "})
        assert response.status_code == 200
        assert b"can&#39;t be blank" in response.data
        assert Organization.query.count() == 0

    def test_rejects_admin_of_another_organization(self, client, make_organization):
        """The admin of an organization cannot start a second one."""
        make_organization(self.user, name="first")
        client.post("/organizations/", data={"name": "second"})
        assert Organization.query.count() == 1
        assert Organization.query.one().name == "first"

    def test_member_of_another_organization_is_moved(
        self, client, make_user, make_organization
    ):
        """A plain member who creates an organization leaves the old one."""
        first = make_organization(make_user(), name="first")
        first_id = first.id
        organization_service.add_member(first, first.admin, self.user.id)

        client.post("/organizations/", data={"name": "second"})

        assert Organization.query.count() == 2
        second = Organization.query.filter_by(name="second").one()
        assert second.admin_id == self.user.id
        assert _reload(User, self.user.id).organization_id == second.id
        assert self.user.id not in _member_ids(first_id)

    def test_writes_audit_entry(self, client):
        """The create is recorded in the audit log."""
        client.post("/organizations/", data={"name": "orga"})
        entry = AuditLog.query.filter_by(
            action_type="CREATE", entity_type="organization"
        ).one()
        assert entry.user_id == self.user.id


class TestCreateAnonymous:
    """Anonymous visitors are sent to the sign-in page."""

    def test_anonymous_create_redirects_to_login(self, client):
        response = client.post("/organizations/", data={"name": "orga"})
        assert response.status_code == 302
        assert "/auth/login" in response.headers["Location"]
        assert Organization.query.count() == 0


class TestDestroy:
    """DELETE /organizations/<id> and POST /organizations/<id>/delete"""

    @pytest.fixture(autouse=True)
    def _setup(self, user, make_organization):
        self.user = user
        self.organization = make_organization(user, name="corpo")
        self.organization_id = self.organization.id

    def test_admin_delete_removes_organization(self, client, login):
        """The admin can delete; the count drops to zero."""
        login(self.user)
        response = client.delete(f"/organizations/{self.organization_id}")
        assert response.status_code == 302
        assert Organization.query.count() == 0

    def test_admin_delete_clears_member_organization_id(self, client, login):
        """The admin's own organization_id is cleared."""
        login(self.user)
        client.delete(f"/organizations/{self.organization_id}")
        assert _reload(User, self.user.id).organization_id is None

    def test_admin_delete_releases_every_member(
        self, client, login, make_user
    ):
        """All members, not just the admin, leave the organization."""
        member = make_user()
        organization_service.add_member(self.organization, self.user, member.id)

        login(self.user)
        client.post(f"/organizations/{self.organization_id}/delete")

        assert _reload(User, member.id).organization_id is None
        assert _reload(User, member.id).organization_joined_at is None
        assert Organization.query.count() == 0

    def test_non_admin_delete_changes_nothing(self, client, login, other_user):
        """Another user's delete request is ignored."""
        login(other_user)
        response = client.delete(f"/organizations/{self.organization_id}")

        assert response.status_code == 302
        assert response.headers["Location"].endswith(
            f"/organizations/{self.organization_id}"
        )
        assert Organization.query.count() == 1
        assert _reload(User, self.user.id).organization_id == self.organization_id

    def test_non_admin_is_stopped_before_the_service(
        self, client, login, other_user, monkeypatch
    ):
        """Non-admins are redirected without the service being called."""
        calls = []
        monkeypatch.setattr(
            organization_service,
            "destroy_organization",
            lambda *args, **kwargs: calls.append(args),
        )
        login(other_user)
        response = client.post(f"/organizations/{self.organization_id}/delete")

        assert response.status_code == 302
        assert calls == []

    def test_unknown_organization_returns_404(self, client, login):
        login(self.user)
        response = client.delete("/organizations/9999")
        assert response.status_code == 404


class TestUpdate:
    """POST /organizations/<id>/update"""

    OLD_NAME = "old_name"
    OLD_URL = "old_url.com"
    NEW_NAME = "new_name"
    NEW_URL = "new_url.com"

    @pytest.fixture(autouse=True)
    def _setup(self, user, make_organization):
        self.user = user
        organization = make_organization(
            user, name=self.OLD_NAME, homesite_url=self.OLD_URL
        )
        self.organization_id = organization.id
        self.url = f"/organizations/{organization.id}/update"

    def _stored(self):
        return _reload(Organization, self.organization_id)

    # -- As the admin ------------------------------------------------------

    def test_updating_homesite_url_only(self, client, login):
        login(self.user)
        client.post(self.url, data={"homesite_url": self.NEW_URL})
        assert self._stored().homesite_url == self.NEW_URL
        assert self._stored().name == self.OLD_NAME

    def test_updating_name_only(self, client, login):
        login(self.user)
        client.post(self.url, data={"name": self.NEW_NAME})
        assert self._stored().name == self.NEW_NAME
        assert self._stored().homesite_url == self.OLD_URL

    def test_updating_both_fields(self, client, login):
        login(self.user)
        response = client.post(
            self.url, data={"name": self.NEW_NAME, "homesite_url": self.NEW_URL}
        )
        assert response.status_code == 302
        assert self._stored().name == self.NEW_NAME
        assert self._stored().homesite_url == self.NEW_URL

    def test_put_is_accepted(self, client, login):
        login(self.user)
        client.put(
            f"/organizations/{self.organization_id}", data={"name": self.NEW_NAME}
        )
        assert self._stored().name == self.NEW_NAME

    def test_invalid_name_is_rejected_but_valid_url_applies(self, client, login):
        """Fields are validated independently."""
        login(self.user)
        response = client.post(
            self.url, data={"name": "", "homesite_url": self.NEW_URL}
        )
        assert self._stored().name == self.OLD_NAME
        assert self._stored().homesite_url == self.NEW_URL
        # The admin is sent back to the form to fix the name.
        assert response.headers["Location"].endswith(
            f"/organizations/{self.organization_id}/edit"
        )

    def test_rejected_name_is_flashed(self, client, login):
        login(self.user)
        response = client.post(
            self.url, data={"name": "  "}, follow_redirects=True
        )
        assert response.status_code == 200
        assert b"can&#39;t be blank" in response.data

    # -- As someone else ---------------------------------------------------

    def test_non_admin_update_changes_nothing(self, client, login, other_user):
        login(other_user)
        response = client.post(
            self.url, data={"name": self.NEW_NAME, "homesite_url": self.NEW_URL}
        )
        assert response.status_code == 302
        assert self._stored().name == self.OLD_NAME
        assert self._stored().homesite_url == self.OLD_URL

    def test_non_admin_cannot_open_edit_form(self, client, login, other_user):
        login(other_user)
        response = client.get(f"/organizations/{self.organization_id}/edit")
        assert response.status_code == 302


class TestAddMember:
    """POST /organizations/<id>/members"""

    @pytest.fixture(autouse=True)
    def _setup(self, user, make_user, make_organization):
        self.user = user
        self.organization = make_organization(user, name="org_name")
        self.organization_id = self.organization.id
        self.new_user = make_user(name="Newcomer")
        self.url = f"/organizations/{self.organization_id}/members"

    # -- As the admin ------------------------------------------------------

    def test_adding_new_user_increases_member_count(self, client, login):
        login(self.user)
        before = len(_member_ids(self.organization_id))
        client.post(self.url, data={"new_member_id": self.new_user.id})
        assert len(_member_ids(self.organization_id)) == before + 1

    def test_adding_new_user_keeps_admin_first(self, client, login):
        login(self.user)
        client.post(self.url, data={"new_member_id": self.new_user.id})
        assert _member_ids(self.organization_id) == [self.user.id, self.new_user.id]

    def test_adding_existing_member_is_idempotent(self, client, login):
        login(self.user)
        client.post(self.url, data={"new_member_id": self.new_user.id})
        client.post(self.url, data={"new_member_id": self.new_user.id})
        assert _member_ids(self.organization_id) == [self.user.id, self.new_user.id]

    def test_member_order_follows_join_order(self, client, login, make_user):
        """Members are listed in the order they joined, not by user id."""
        third = make_user(name="Third")
        login(self.user)
        client.post(self.url, data={"new_member_id": third.id})
        client.post(self.url, data={"new_member_id": self.new_user.id})
        assert _member_ids(self.organization_id) == [
            self.user.id,
            third.id,
            self.new_user.id,
        ]

    def test_unknown_user_is_flashed(self, client, login):
        login(self.user)
        response = client.post(
            self.url, data={"new_member_id": 9999}, follow_redirects=True
        )
        assert b"User ID 9999 not found." in response.data
        assert _member_ids(self.organization_id) == [self.user.id]

    def test_member_of_other_organization_is_rejected(
        self, client, login, make_organization
    ):
        other_org = make_organization(self.new_user, name="elsewhere")
        login(self.user)
        client.post(self.url, data={"new_member_id": self.new_user.id})
        assert _member_ids(self.organization_id) == [self.user.id]
        assert _reload(User, self.new_user.id).organization_id == other_org.id

    # -- As someone else ---------------------------------------------------

    def test_non_admin_cannot_add_members(self, client, login):
        login(self.new_user)
        response = client.post(self.url, data={"new_member_id": self.new_user.id})
        assert response.status_code == 302
        assert _member_ids(self.organization_id) == [self.user.id]


class TestRemoveMember:
    """POST /organizations/<id>/members/remove"""

    @pytest.fixture(autouse=True)
    def _setup(self, user, make_user, make_organization):
        self.user = user
        self.organization = make_organization(user, name="corpo")
        self.organization_id = self.organization.id
        self.member = make_user(name="Member")
        organization_service.add_member(self.organization, user, self.member.id)
        self.url = f"/organizations/{self.organization_id}/members/remove"

    def test_admin_removes_member(self, client, login):
        login(self.user)
        response = client.post(self.url, data={"user_id": self.member.id})
        assert response.status_code == 302
        assert _member_ids(self.organization_id) == [self.user.id]
        assert _reload(User, self.member.id).organization_id is None

    def test_admin_cannot_remove_self(self, client, login):
        login(self.user)
        client.post(self.url, data={"user_id": self.user.id})
        assert _member_ids(self.organization_id) == [self.user.id, self.member.id]

    def test_non_admin_cannot_remove_members(self, client, login):
        login(self.member)
        client.post(self.url, data={"user_id": self.member.id})
        assert _member_ids(self.organization_id) == [self.user.id, self.member.id]

    def test_removing_non_member_is_flashed(self, client, login, make_user):
        stranger = make_user(name="Stranger")
        login(self.user)
        response = client.post(
            self.url, data={"user_id": stranger.id}, follow_redirects=True
        )
        assert b"Stranger is not a member of corpo." in response.data


class TestReadViews:
    """Index, show, new and edit pages."""

    @pytest.fixture(autouse=True)
    def _setup(self, user, make_organization, login):
        self.user = user
        self.organization = make_organization(
            user, name="Visible Org", homesite_url="visible.example"
        )
        login(user)

    def test_index_lists_organizations(self, client):
        response = client.get("/organizations/")
        assert response.status_code == 200
        assert b"Visible Org" in response.data

    def test_show_lists_members(self, client):
        response = client.get(f"/organizations/{self.organization.id}")
        assert response.status_code == 200
        assert b"visible.example" in response.data
        assert self.user.email.encode() in response.data

    def test_show_unknown_organization_returns_404(self, client):
        response = client.get("/organizations/9999")
        assert response.status_code == 404

    def test_new_form_renders(self, client):
        response = client.get("/organizations/new")
        assert response.status_code == 200

    def test_admin_can_open_edit_form(self, client):
        response = client.get(f"/organizations/{self.organization.id}/edit")
        assert response.status_code == 200
        assert b"Visible Org" in response.data
