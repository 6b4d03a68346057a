from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from poultry_ledger.common.exceptions import GroupInUseError, GroupNotFoundError, InvalidParentError, ValidationError
from poultry_ledger.logger_config import logger
from poultry_ledger.models.account import Customer, Ledger, Vendor
from poultry_ledger.models.group import Group, GroupType, generate_custom_id, slugify
from poultry_ledger.services.account_tree import check_circular_reference

# Standard 28 predefined groups: (name, type, parent name)
PREDEFINED_GROUPS = [
    # Capital and assets
    ("Branch / Divisions", GroupType.ASSETS, None),
    ("Capital Account", GroupType.LIABILITY, None),
    ("Reserves & Surplus", GroupType.LIABILITY, None),
    ("Current Assets", GroupType.ASSETS, None),
    ("Bank Accounts", GroupType.ASSETS, "Current Assets"),
    ("Cash-in-Hand", GroupType.ASSETS, "Current Assets"),
    ("Deposits (Asset)", GroupType.ASSETS, "Current Assets"),
    ("Loans & Advances (Asset)", GroupType.ASSETS, "Current Assets"),
    ("Stock-in-Hand", GroupType.ASSETS, "Current Assets"),
    ("Sundry Debtors", GroupType.ASSETS, "Current Assets"),
    ("Fixed Assets", GroupType.ASSETS, None),
    ("Investments", GroupType.ASSETS, None),

    # Liability
    ("Current Liabilities", GroupType.LIABILITY, None),
    ("Bank OD A/c", GroupType.LIABILITY, "Current Liabilities"),
    ("Sundry Creditors", GroupType.LIABILITY, "Current Liabilities"),
    ("Duties & Taxes", GroupType.LIABILITY, "Current Liabilities"),
    ("Provisions", GroupType.LIABILITY, "Current Liabilities"),
    ("Loans (Liability)", GroupType.LIABILITY, None),

    # Income
    ("Sales Accounts", GroupType.INCOME, None),
    ("Indirect Income", GroupType.INCOME, None),
    ("Direct Income", GroupType.INCOME, None),

    # Expenses
    ("Purchase Accounts", GroupType.EXPENSES, None),
    ("Indirect Expenses", GroupType.EXPENSES, None),
    ("Direct Expenses", GroupType.EXPENSES, None),

    # Additional common groups
    ("Suspense A/c", GroupType.ASSETS, None),
    ("Misc. Expenses (Asset)", GroupType.ASSETS, None),
    ("Secured Loans", GroupType.LIABILITY, "Loans (Liability)"),
    ("Unsecured Loans", GroupType.LIABILITY, "Loans (Liability)"),
]

ALL_VENDOR_GROUPS = {"Purchase Accounts"}

_UNSET = object()

# ==================== QUERY OPERATIONS ====================

def get_group_by_id(db: Session, group_id: str, active_only: bool = True) -> Optional[Group]:
    query = db.query(Group).options(joinedload(Group.parent)).filter(Group.id == group_id)
    if active_only:
        query = query.filter(Group.is_active.is_(True))
    return query.first()


def get_group_by_name(db: Session, name: str) -> Optional[Group]:
    return db.query(Group).filter(func.lower(Group.name) == name.strip().lower()).first()


def get_groups(db: Session, type: Optional[GroupType] = None) -> Tuple[List[Group], Dict[str, int]]:
    """Active groups sorted by name, with the number of active ledgers in each."""
    query = db.query(Group).options(joinedload(Group.parent)).filter(Group.is_active.is_(True))
    if type:
        query = query.filter(Group.type == type)
    groups = query.order_by(Group.name).all()

    ledger_counts = dict(
        db.query(Ledger.group_id, func.count(Ledger.id))
        .filter(Ledger.is_active.is_(True))
        .group_by(Ledger.group_id)
        .all()
    )
    return groups, ledger_counts


def get_groups_by_type(db: Session, type: GroupType) -> List[Group]:
    groups, _ = get_groups(db, GroupType(type))
    return groups


def get_group_detail(db: Session, group_id: str) -> Tuple[Group, List[Group], List[Ledger]]:
    group = get_group_by_id(db, group_id)
    if not group:
        raise GroupNotFoundError("Group not found")

    children = (
        db.query(Group)
        .filter(Group.parent_id == group_id, Group.is_active.is_(True))
        .order_by(Group.name)
        .all()
    )
    ledgers = (
        db.query(Ledger)
        .filter(Ledger.group_id == group_id, Ledger.is_active.is_(True))
        .order_by(Ledger.name)
        .all()
    )
    return group, children, ledgers


def _parent_map(db: Session) -> Dict[str, Optional[str]]:
    return dict(db.query(Group.id, Group.parent_id).all())


def _validate_parent(db: Session, group_id: Optional[str], parent_id: str):
    if group_id is not None and parent_id == group_id:
        check_circular_reference(group_id, parent_id, {})
    parent = get_group_by_id(db, parent_id)
    if not parent:
        raise InvalidParentError("Parent group not found or inactive")
    check_circular_reference(group_id, parent_id, _parent_map(db))


# ==================== WRITE OPERATIONS ====================

def add_group(
    db: Session,
    name: str,
    type: GroupType,
    parent_id: Optional[str] = None,
    includes_all_vendors: bool = False,
) -> Group:
    """Create a group, optionally under an existing parent."""
    name = name.strip()
    if get_group_by_name(db, name):
        raise ValidationError("Group with this name already exists")
    if parent_id:
        _validate_parent(db, None, parent_id)

    group_id = generate_custom_id("GRP")
    while db.query(Group.id).filter(Group.id == group_id).first():
        group_id = generate_custom_id("GRP")

    group = Group(
        id=group_id,
        name=name,
        slug=slugify(name),
        type=GroupType(type),
        parent_id=parent_id or None,
        includes_all_vendors=includes_all_vendors,
    )
    db.add(group)

    try:
        db.commit()
        db.refresh(group)
        logger.info(f"Group {group.name} ({group.id}) created")
        return group
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating group: {str(e)}")
        raise ValueError("Failed to create group")


def update_group(
    db: Session,
    group_id: str,
    name: Optional[str] = None,
    type: Optional[GroupType] = None,
    parent_id=_UNSET,
    includes_all_vendors: Optional[bool] = None,
) -> Group:
    """
    Update a group. `parent_id` left out keeps the current parent, None
    makes the group a root. A parent change that would close a loop is
    rejected before anything is written.
    """
    group = get_group_by_id(db, group_id)
    if not group:
        raise GroupNotFoundError("Group not found")

    if parent_id is not _UNSET and parent_id:
        _validate_parent(db, group_id, parent_id)

    if name:
        name = name.strip()
        existing = get_group_by_name(db, name)
        if existing and existing.id != group.id:
            raise ValidationError("Group with this name already exists")
        group.name = name
        group.slug = slugify(name)
    if type:
        group.type = GroupType(type)
    if parent_id is not _UNSET:
        group.parent_id = parent_id or None
    if includes_all_vendors is not None:
        group.includes_all_vendors = includes_all_vendors

    try:
        db.commit()
        db.refresh(group)
        return group
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating group {group_id}: {str(e)}")
        raise ValueError("Failed to update group")


def delete_group(db: Session, group_id: str) -> Group:
    """Soft delete. Refused while active sub-groups or accounts still point at the group."""
    group = get_group_by_id(db, group_id)
    if not group:
        raise GroupNotFoundError("Group not found")

    children = (
        db.query(func.count(Group.id))
        .filter(Group.parent_id == group_id, Group.is_active.is_(True))
        .scalar()
    )
    if children > 0:
        raise GroupInUseError("Cannot delete group with child groups. Please delete or move child groups first.")

    for model, label in ((Ledger, "ledgers"), (Customer, "customers"), (Vendor, "vendors")):
        members = (
            db.query(func.count(model.id))
            .filter(model.group_id == group_id, model.is_active.is_(True))
            .scalar()
        )
        if members > 0:
            raise GroupInUseError(f"Cannot delete group with {label}. Please delete or move {label} first.")

    group.is_active = False

    try:
        db.commit()
        db.refresh(group)
        logger.info(f"Group {group.name} ({group.id}) deleted")
        return group
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting group {group_id}: {str(e)}")
        raise ValueError("Failed to delete group")


def initialize_predefined_groups(db: Session) -> List[Group]:
    """Create the standard chart of accounts. Safe to run repeatedly."""
    logger.info("Initializing predefined groups...")
    by_name: Dict[str, Group] = {}
    created: List[Group] = []

    # first pass: every group without a parent
    for name, group_type, _ in PREDEFINED_GROUPS:
        slug = slugify(name)
        group = (
            db.query(Group).filter(Group.slug == slug, Group.is_predefined.is_(True)).first()
            or db.query(Group).filter(Group.name == name, Group.is_predefined.is_(True)).first()
        )
        if not group:
            group = Group(
                id=generate_custom_id("GRP"),
                name=name,
                slug=slug,
                type=group_type,
                parent_id=None,
                is_predefined=True,
                is_active=True,
                includes_all_vendors=name in ALL_VENDOR_GROUPS,
            )
            db.add(group)
            created.append(group)
            logger.debug(f"Created group: {name}")
        by_name[name] = group
    db.flush()

    # second pass: parent links
    for name, _, parent_name in PREDEFINED_GROUPS:
        group = by_name[name]
        if parent_name and not group.parent_id:
            group.parent_id = by_name[parent_name].id

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error initializing predefined groups: {str(e)}")
        raise ValueError("Failed to initialize predefined groups")

    logger.info(f"Predefined groups ready: {len(created)} created, {len(PREDEFINED_GROUPS) - len(created)} existing")
    return created
