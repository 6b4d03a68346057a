from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from poultry_ledger.common.exceptions import CircularReferenceError, GroupNotFoundError
from poultry_ledger.logger_config import logger
from poultry_ledger.models.group import GroupType
from poultry_ledger.services.transaction_aggregator import AccountKind, AccountRef


@dataclass
class GroupNode:
    id: str
    name: str
    type: GroupType
    parent_id: Optional[str]
    includes_all_vendors: bool = False
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)
    members: Dict[AccountKind, List[AccountRef]] = field(
        default_factory=lambda: {kind: [] for kind in AccountKind})


class AccountTree:
    """
    Chart of accounts held as a flat node list with an id index.
    Walks use an explicit stack, so depth is bounded only by memory.
    """

    def __init__(self):
        self.nodes: List[GroupNode] = []
        self.index: Dict[str, int] = {}
        self.roots: List[int] = []
        self.accounts: Dict[AccountKind, List[AccountRef]] = {kind: [] for kind in AccountKind}

    @classmethod
    def build(cls, groups: Iterable, ledgers: Iterable = (), customers: Iterable = (),
              vendors: Iterable = ()) -> "AccountTree":
        tree = cls()

        # pass 1: nodes
        for group in groups:
            if group.is_active is False:
                continue
            tree.index[str(group.id)] = len(tree.nodes)
            tree.nodes.append(GroupNode(
                id=str(group.id),
                name=group.name,
                type=GroupType(group.type),
                parent_id=str(group.parent_id) if group.parent_id is not None else None,
                includes_all_vendors=bool(group.includes_all_vendors),
            ))

        # pass 2: parent links
        for position, node in enumerate(tree.nodes):
            parent = tree.index.get(node.parent_id) if node.parent_id else None
            if parent is not None and parent != position:
                node.parent = parent
        tree._detach_cycles()
        for position, node in enumerate(tree.nodes):
            if node.parent is None:
                tree.roots.append(position)
            else:
                tree.nodes[node.parent].children.append(position)

        for model in ledgers:
            tree._attach(model)
        for model in customers:
            tree._attach(model)
        for model in vendors:
            tree._attach(model)
        return tree

    def _detach_cycles(self):
        """Stored data may already contain a loop; cut it so walks terminate."""
        settled = set()
        for start in range(len(self.nodes)):
            path = []
            on_path = set()
            current = start
            while current is not None and current not in settled:
                if current in on_path:
                    node = self.nodes[current]
                    logger.warning(f"Group {node.id} ({node.name}) is part of a parent cycle, treating it as a root")
                    node.parent = None
                    break
                path.append(current)
                on_path.add(current)
                current = self.nodes[current].parent
            settled.update(path)

    def _attach(self, model):
        if model.is_active is False:
            return
        position = self.index.get(str(model.group_id)) if model.group_id is not None else None
        group_type = self.nodes[position].type if position is not None else None
        account = AccountRef.from_model(model, group_type)
        self.accounts[account.kind].append(account)
        if position is not None:
            self.nodes[position].members[account.kind].append(account)

    # ===== LOOKUPS =====

    def node(self, group_id: str) -> GroupNode:
        position = self.index.get(str(group_id))
        if position is None:
            raise GroupNotFoundError(f"Group {group_id} not found")
        return self.nodes[position]

    def children_of(self, group_id: str) -> List[GroupNode]:
        return [self.nodes[child] for child in self.node(group_id).children]

    def group_type(self, group_id: str) -> GroupType:
        return self.node(group_id).type

    def direct_members(self, group_id: str, kind: AccountKind, include_all_vendors: bool = True) -> List[AccountRef]:
        node = self.node(group_id)
        if include_all_vendors and kind == AccountKind.VENDOR and node.includes_all_vendors:
            return list(self.accounts[AccountKind.VENDOR])
        return list(node.members[kind])

    def descendants_of(self, group_id: str, kind: AccountKind) -> List[AccountRef]:
        """Members of `kind` anywhere under the group, each exactly once."""
        found: Dict[str, AccountRef] = {}
        visited = set()
        stack = [self.index[self.node(group_id).id]]
        while stack:
            position = stack.pop()
            if position in visited:
                continue
            visited.add(position)
            node = self.nodes[position]
            members = node.members[kind]
            if kind == AccountKind.VENDOR and node.includes_all_vendors:
                members = self.accounts[AccountKind.VENDOR]
            for account in members:
                found.setdefault(account.id, account)
            stack.extend(reversed(node.children))
        return list(found.values())

    def same_type_roots(self, group_type: GroupType) -> List[GroupNode]:
        """Groups of the type whose parent is absent or of another type."""
        roots = []
        for node in self.nodes:
            if node.type != group_type:
                continue
            if node.parent is None or self.nodes[node.parent].type != group_type:
                roots.append(node)
        return roots

    def same_type_children(self, node: GroupNode) -> List[GroupNode]:
        return [self.nodes[child] for child in node.children if self.nodes[child].type == node.type]

    def parent_map(self) -> Dict[str, Optional[str]]:
        return {node.id: node.parent_id for node in self.nodes}


def check_circular_reference(group_id: Optional[str], parent_id: Optional[str],
                             parent_of: Mapping[str, Optional[str]]) -> None:
    """
    Raise CircularReferenceError if making `parent_id` the parent of `group_id`
    would put the group among its own ancestors. Nothing is modified.
    """
    if parent_id is None:
        return
    if group_id is not None and str(parent_id) == str(group_id):
        raise CircularReferenceError("A group cannot be its own parent")

    visited = {str(group_id)} if group_id is not None else set()
    current = str(parent_id)
    while current is not None:
        if current in visited:
            raise CircularReferenceError()
        visited.add(current)
        parent = parent_of.get(current)
        current = str(parent) if parent is not None else None
