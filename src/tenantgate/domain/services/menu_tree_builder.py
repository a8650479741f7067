"""Menu tree assembly over flat node sets.

Pure functions: callers supply the nodes, nothing here touches storage.
Every builder indexes children by parent id once, so assembly is linear in
the number of nodes. Sibling groups are ordered by ``sort_order`` with ties
broken by creation time and then id.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime

from tenantgate.domain.entities.menu import Menu, MenuTreeNode, UserMenuNode

ROOT_PARENT_ID = ""

_EPOCH = datetime.min


def _sibling_key(menu: Menu) -> tuple[int, datetime, str]:
    created_at = menu.created_at or _EPOCH
    # Normalize aware and naive datetimes so mixed inputs stay comparable.
    return menu.sort_order, created_at.replace(tzinfo=None), menu.id


def index_children(nodes: Iterable[Menu]) -> dict[str, list[Menu]]:
    """Group nodes by parent id, each group sorted for output.

    Args:
        nodes: Flat node set.

    Returns:
        Mapping of parent id to its ordered children.
    """
    children: dict[str, list[Menu]] = defaultdict(list)
    for node in nodes:
        children[node.parent_id].append(node)
    for group in children.values():
        group.sort(key=_sibling_key)
    return children


def build_tree(nodes: Sequence[Menu], parent_id: str = ROOT_PARENT_ID) -> list[MenuTreeNode]:
    """Build the administrative tree under ``parent_id``.

    Nodes whose parent is not reachable from ``parent_id`` are left out.
    A node id seen twice on the current path stops the descent, so a
    corrupted parent graph cannot loop forever.

    Args:
        nodes: Flat node set.
        parent_id: Id of the node whose descendants form the result.

    Returns:
        Ordered list of root tree nodes.
    """
    children = index_children(nodes)
    seen: set[str] = set()

    def assemble(pid: str) -> list[MenuTreeNode]:
        result = []
        for menu in children.get(pid, []):
            if menu.id in seen:
                continue
            seen.add(menu.id)
            result.append(MenuTreeNode(menu=menu, children=assemble(menu.id)))
        return result

    return assemble(parent_id)


def filter_navigable(nodes: Sequence[Menu], parent_id: str = ROOT_PARENT_ID) -> list[Menu]:
    """Keep only nodes that belong in a user navigation tree.

    A node is kept when it is enabled, visible, not a button, and its parent
    is either ``parent_id`` or itself kept. Descendants of a hidden, disabled
    or absent ancestor are pruned rather than promoted.

    Args:
        nodes: Flat node set.
        parent_id: Id treated as the navigation root.

    Returns:
        The kept nodes, in input order.
    """
    children = index_children(nodes)
    kept: set[str] = set()
    stack = [parent_id]
    while stack:
        pid = stack.pop()
        for menu in children.get(pid, []):
            if menu.id in kept or not menu.is_navigable:
                continue
            kept.add(menu.id)
            stack.append(menu.id)
    return [node for node in nodes if node.id in kept]


def build_user_menu_tree(
    nodes: Sequence[Menu], parent_id: str = ROOT_PARENT_ID
) -> list[UserMenuNode]:
    """Build the end-user navigation tree under ``parent_id``.

    Applies :func:`filter_navigable` first, then projects each node to the
    reduced navigation field set.
    """
    children = index_children(filter_navigable(nodes, parent_id))

    def assemble(pid: str) -> list[UserMenuNode]:
        return [
            UserMenuNode(
                id=menu.id,
                name=menu.name,
                route=menu.route,
                component=menu.component,
                icon=menu.icon,
                sort_order=menu.sort_order,
                children=assemble(menu.id),
            )
            for menu in children.get(pid, [])
        ]

    return assemble(parent_id)


def is_descendant(nodes: Iterable[Menu], ancestor_id: str, node_id: str) -> bool:
    """Check whether ``node_id`` lies anywhere in the subtree of ``ancestor_id``.

    Walks the full subtree breadth-first, not just immediate children.

    Args:
        nodes: Flat node set containing at least the subtree.
        ancestor_id: Root of the subtree to search.
        node_id: Node to look for.

    Returns:
        True if ``node_id`` is a strict descendant of ``ancestor_id``.
    """
    children = index_children(nodes)
    visited: set[str] = {ancestor_id}
    frontier = [ancestor_id]
    while frontier:
        pid = frontier.pop()
        for child in children.get(pid, []):
            if child.id == node_id:
                return True
            if child.id not in visited:
                visited.add(child.id)
                frontier.append(child.id)
    return False
