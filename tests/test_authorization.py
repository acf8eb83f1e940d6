from core.authorization import (
    can_add_menu_item, can_create_franchise, can_delete_user, can_list_users, can_manage_store,
    can_update_user, can_view_user_franchises,
)
from core.dependencies import CurrentUser

ADMIN = CurrentUser(id=1, email="a@jwt.com", roles=[{"role": "admin"}])
DINER = CurrentUser(id=2, email="d@jwt.com", roles=[{"role": "diner"}])
FRANCHISEE = CurrentUser(id=3, email="f@jwt.com", roles=[{"role": "diner"}, {"role": "franchisee", "objectId": 5}])

FRANCHISE = {"id": 5, "name": "pizzaPocket", "admins": [{"id": 3, "name": "f", "email": "f@jwt.com"}], "stores": []}


def test_admin_only_actions():
    for check in (can_list_users, can_delete_user, can_create_franchise, can_add_menu_item):
        assert check(ADMIN)
        assert not check(DINER)
        assert not check(FRANCHISEE)


def test_update_user_self_or_admin():
    assert can_update_user(DINER, 2)
    assert can_update_user(ADMIN, 2)
    assert not can_update_user(FRANCHISEE, 2)


def test_view_franchises_self_or_admin():
    assert can_view_user_franchises(FRANCHISEE, 3)
    assert can_view_user_franchises(ADMIN, 3)
    assert not can_view_user_franchises(DINER, 3)


def test_store_management_uses_franchise_admin_list():
    assert can_manage_store(ADMIN, FRANCHISE)
    assert can_manage_store(FRANCHISEE, FRANCHISE)
    assert not can_manage_store(DINER, FRANCHISE)
    assert not can_manage_store(FRANCHISEE, {**FRANCHISE, "admins": []})
