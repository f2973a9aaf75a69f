from __future__ import annotations

import pytest

from storefront.admin.models import AdminUserPatch, RoleChangeRequest, StatusChangeRequest
from storefront.admin.service import LAST_ADMIN_MESSAGE, AdminService
from storefront.api.errors import ApiError
from storefront.auth.models import Role
from storefront.auth.service import AuthService
from storefront.auth.tokens import TokenCodec
from tests.fakes import MemoryProductRepository, MemoryUserRepository, make_config


def _build_service() -> tuple[AdminService, MemoryUserRepository]:
    config = make_config()
    repo = MemoryUserRepository()
    auth = AuthService(repo, TokenCodec(config.auth))
    service = AdminService(repo, MemoryProductRepository(), auth, config.auth)
    return service, repo


def test_admin_login_bootstraps_first_admin() -> None:
    service, repo = _build_service()

    admin, token = service.login("Chief", "chief-pass")

    assert admin.role is Role.ADMIN
    assert admin.username == "chief"
    assert admin.email == "admin@storefront.test"
    assert token
    assert repo.count(role=Role.ADMIN) == 1


def test_admin_login_after_bootstrap_checks_credentials() -> None:
    service, _repo = _build_service()
    service.login("chief", "chief-pass")

    admin, _ = service.login("chief", "chief-pass")
    with pytest.raises(ApiError) as wrong_password:
        service.login("chief", "nope")
    with pytest.raises(ApiError) as unknown:
        service.login("someone", "chief-pass")

    assert admin.is_active
    assert admin.last_login is not None
    assert wrong_password.value.status_code == 401
    assert unknown.value.status_code == 401


def test_admin_login_requires_both_fields() -> None:
    service, _repo = _build_service()

    with pytest.raises(ApiError) as exc:
        service.login("", "pass")

    assert exc.value.status_code == 400


def test_admin_logout_deactivates_and_clears_refresh_token() -> None:
    service, repo = _build_service()
    admin, _ = service.login("chief", "chief-pass")
    repo.set_refresh_token(admin.id, "stale")

    service.logout(admin)

    stored = repo.get_by_id(admin.id)
    assert not stored.is_active
    assert stored.refresh_token is None
    assert stored.last_logout is not None


def test_change_role_rejects_self_change() -> None:
    service, repo = _build_service()
    admin = repo.seed("root", role=Role.ADMIN)

    with pytest.raises(ApiError) as exc:
        service.change_role(admin, RoleChangeRequest(user_id=admin.id, new_role="user"))

    assert exc.value.status_code == 403


def test_change_role_validates_role_and_id() -> None:
    service, repo = _build_service()
    admin = repo.seed("root", role=Role.ADMIN)
    user = repo.seed("alice")

    with pytest.raises(ApiError) as bad_role:
        service.change_role(admin, RoleChangeRequest(user_id=user.id, new_role="owner"))
    with pytest.raises(ApiError) as bad_id:
        service.change_role(admin, RoleChangeRequest(user_id="nope", new_role="user"))

    assert bad_role.value.status_code == 400
    assert "Allowed: user, moderator, admin" in bad_role.value.message
    assert bad_id.value.status_code == 400


def test_change_role_protects_last_active_admin() -> None:
    service, repo = _build_service()
    moderator = repo.seed("mod", role=Role.MODERATOR)
    admin = repo.seed("root", role=Role.ADMIN)

    with pytest.raises(ApiError) as exc:
        service.change_role(
            moderator, RoleChangeRequest(user_id=admin.id, new_role="user")
        )

    assert exc.value.status_code == 403
    assert exc.value.message == LAST_ADMIN_MESSAGE
    assert repo.get_by_id(admin.id).role is Role.ADMIN


def test_change_role_demotes_one_of_two_admins() -> None:
    service, repo = _build_service()
    first = repo.seed("root", role=Role.ADMIN)
    second = repo.seed("deputy", role=Role.ADMIN)

    updated = service.change_role(
        first, RoleChangeRequest(user_id=second.id, new_role="moderator")
    )

    assert updated.role is Role.MODERATOR
    assert repo.count(role=Role.ADMIN) == 1


def test_change_status_toggles_and_protects_last_admin() -> None:
    service, repo = _build_service()
    admin = repo.seed("root", role=Role.ADMIN)
    user = repo.seed("alice")

    toggled = service.change_status(admin, StatusChangeRequest(user_id=user.id))
    explicit = service.change_status(
        admin, StatusChangeRequest(user_id=user.id, is_active=False)
    )
    with pytest.raises(ApiError) as exc:
        service.change_status(
            admin, StatusChangeRequest(user_id=admin.id, is_active=False)
        )

    assert toggled.is_active is False
    assert explicit.is_active is False
    assert exc.value.message == LAST_ADMIN_MESSAGE


def test_delete_user_refuses_last_admin_and_rejects_bad_id() -> None:
    service, repo = _build_service()
    admin = repo.seed("root", role=Role.ADMIN)
    user = repo.seed("alice")

    with pytest.raises(ApiError) as last_admin:
        service.delete_user(admin, admin.id)
    with pytest.raises(ApiError) as bad_id:
        service.delete_user(admin, "123")
    service.delete_user(admin, user.id)

    assert last_admin.value.status_code == 403
    assert bad_id.value.status_code == 400
    assert repo.get_by_id(user.id) is None


def test_update_user_requires_some_field() -> None:
    service, repo = _build_service()
    user = repo.seed("alice")

    with pytest.raises(ApiError) as exc:
        service.update_user(user.id, AdminUserPatch())
    updated = service.update_user(user.id, AdminUserPatch(full_name=" Alice A. "))

    assert exc.value.status_code == 400
    assert updated.full_name == "Alice A."


def test_search_and_stats() -> None:
    service, repo = _build_service()
    repo.seed("root", role=Role.ADMIN)
    repo.seed("mod", role=Role.MODERATOR)
    repo.seed("alice", is_active=False)

    found = service.search_users(role="moderator", is_active=None, query="")
    stats = service.stats()

    assert [user.username for user in found] == ["mod"]
    assert stats.total_users == 3
    assert stats.inactive_users == 1
    assert stats.admins == 1
    assert stats.moderators == 1
    assert stats.total_products == 0
