"""Group maintenance against the database"""

import pytest

from poultry_ledger.common.exceptions import (
    CircularReferenceError,
    GroupInUseError,
    GroupNotFoundError,
    InvalidParentError,
    ValidationError,
)
from poultry_ledger.models import Group, GroupType
from poultry_ledger.services.group_service import (
    PREDEFINED_GROUPS,
    add_group,
    delete_group,
    get_group_by_id,
    get_group_detail,
    get_groups,
    initialize_predefined_groups,
    update_group,
)
from tests.factories import make_customer, make_ledger


@pytest.fixture
def assets(db):
    return add_group(db, "Current Assets", GroupType.ASSETS)


@pytest.fixture
def debtors(db, assets):
    return add_group(db, "Sundry Debtors", GroupType.ASSETS, parent_id=assets.id)


class TestCreate:
    def test_add_group(self, db, assets):
        assert assets.id.startswith("GRP-")
        assert assets.slug == "current-assets"
        assert assets.is_active is True
        assert assets.parent_id is None

    def test_add_child(self, db, assets, debtors):
        assert debtors.parent_id == assets.id

    def test_duplicate_name_is_rejected(self, db, assets):
        with pytest.raises(ValidationError):
            add_group(db, "  current assets ", GroupType.ASSETS)

    def test_unknown_parent(self, db):
        with pytest.raises(InvalidParentError):
            add_group(db, "Loose", GroupType.OTHERS, parent_id="GRP-NOPE")


class TestUpdate:
    def test_rename(self, db, assets):
        group = update_group(db, assets.id, name="Liquid Assets")
        assert group.name == "Liquid Assets"
        assert group.slug == "liquid-assets"

    def test_move_under_descendant_is_rejected(self, db, assets, debtors):
        with pytest.raises(CircularReferenceError):
            update_group(db, assets.id, parent_id=debtors.id)
        db.expire_all()
        assert get_group_by_id(db, assets.id).parent_id is None
        assert get_group_by_id(db, debtors.id).parent_id == assets.id

    def test_self_parent_is_rejected(self, db, assets):
        with pytest.raises(CircularReferenceError):
            update_group(db, assets.id, parent_id=assets.id)

    def test_none_parent_makes_a_root(self, db, debtors):
        assert update_group(db, debtors.id, parent_id=None).parent_id is None

    def test_leaving_parent_out_keeps_it(self, db, assets, debtors):
        assert update_group(db, debtors.id, name="Trade Debtors").parent_id == assets.id

    def test_inactive_parent_is_rejected(self, db, assets, debtors):
        closed = add_group(db, "Closed Assets", GroupType.ASSETS)
        closed.is_active = False
        db.commit()
        with pytest.raises(InvalidParentError):
            update_group(db, debtors.id, parent_id=closed.id)
        db.expire_all()
        assert get_group_by_id(db, debtors.id).parent_id == assets.id


class TestDelete:
    def test_soft_delete(self, db, assets):
        delete_group(db, assets.id)
        assert get_group_by_id(db, assets.id) is None
        assert get_group_by_id(db, assets.id, active_only=False).is_active is False

    def test_group_with_children_is_kept(self, db, assets, debtors):
        with pytest.raises(GroupInUseError):
            delete_group(db, assets.id)

    def test_group_with_ledgers_is_kept(self, db, assets):
        db.add(make_ledger("LED-CASH", "Cash", assets.id))
        db.commit()
        with pytest.raises(GroupInUseError):
            delete_group(db, assets.id)

    def test_group_with_customers_is_kept(self, db, debtors):
        db.add(make_customer("CUS-1", "Star Chicken", group_id=debtors.id))
        db.commit()
        with pytest.raises(GroupInUseError, match="customers"):
            delete_group(db, debtors.id)

    def test_unknown_group(self, db):
        with pytest.raises(GroupNotFoundError):
            delete_group(db, "GRP-NOPE")


class TestQueries:
    def test_ledger_counts(self, db, assets, debtors):
        db.add(make_ledger("LED-CASH", "Cash", assets.id))
        db.commit()
        groups, counts = get_groups(db)
        assert [group.name for group in groups] == ["Current Assets", "Sundry Debtors"]
        assert counts == {assets.id: 1}

    def test_detail(self, db, assets, debtors):
        db.add(make_ledger("LED-CASH", "Cash", assets.id))
        db.commit()
        group, children, ledgers = get_group_detail(db, assets.id)
        assert group.id == assets.id
        assert [child.id for child in children] == [debtors.id]
        assert [ledger.id for ledger in ledgers] == ["LED-CASH"]


class TestPredefined:
    def test_creates_the_standard_chart(self, db):
        created = initialize_predefined_groups(db)
        assert len(created) == len(PREDEFINED_GROUPS) == 28
        by_name = {group.name: group for group in db.query(Group).all()}
        assert by_name["Sundry Debtors"].parent_id == by_name["Current Assets"].id
        assert by_name["Secured Loans"].parent_id == by_name["Loans (Liability)"].id
        assert by_name["Purchase Accounts"].includes_all_vendors is True
        assert by_name["Sales Accounts"].includes_all_vendors is False

    def test_running_twice_creates_nothing_new(self, db):
        initialize_predefined_groups(db)
        assert initialize_predefined_groups(db) == []
        assert db.query(Group).count() == 28
