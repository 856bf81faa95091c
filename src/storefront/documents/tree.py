"""
Tree editing helpers.

Every helper returns a new tree; the input is never mutated.
"""

import copy
from typing import Any

from ..core.errors import Issue, NotFoundError, ValidationError
from ..core.id import new_node_id

Tree = dict[str, Any]


def find_node(tree: Tree, node_id: str) -> Tree | None:
    """Node with ``node_id``, or None."""
    if tree.get("id") == node_id:
        return tree
    for child in tree.get("children") or []:
        found = find_node(child, node_id)
        if found is not None:
            return found
    return None


def find_parent(tree: Tree, node_id: str) -> Tree | None:
    for child in tree.get("children") or []:
        if child.get("id") == node_id:
            return tree
        found = find_parent(child, node_id)
        if found is not None:
            return found
    return None


def find_by_type(tree: Tree, node_type: str) -> list[Tree]:
    """All nodes of a type, depth-first."""
    found = [tree] if tree.get("type") == node_type else []
    for child in tree.get("children") or []:
        found.extend(find_by_type(child, node_type))
    return found


def collect_ids(tree: Tree) -> set[str]:
    ids = {tree["id"]} if "id" in tree else set()
    for child in tree.get("children") or []:
        ids |= collect_ids(child)
    return ids


def create_node(node_type: str, **fields: Any) -> Tree:
    """New node with a fresh id."""
    node: Tree = {"id": new_node_id(), "type": node_type}
    node.update({key: value for key, value in fields.items() if value is not None})
    return node


def _require(tree: Tree, node_id: str) -> Tree:
    node = find_node(tree, node_id)
    if node is None:
        raise NotFoundError("node", node_id)
    return node


def insert_node(tree: Tree, parent_id: str, node: Tree, index: int | None = None) -> Tree:
    """
    Insert ``node`` under ``parent_id`` at ``index`` (appended when None).

    Raises:
        NotFoundError: Parent does not exist
        ValidationError: Node id already used in the tree
    """
    clashes = collect_ids(node) & collect_ids(tree)
    if clashes:
        raise ValidationError(
            "Duplicate node id", [Issue("node.id", f"already in tree: {sorted(clashes)[0]}")]
        )
    result = copy.deepcopy(tree)
    parent = _require(result, parent_id)
    children = parent.setdefault("children", [])
    position = len(children) if index is None else max(0, min(index, len(children)))
    children.insert(position, copy.deepcopy(node))
    return result


def remove_node(tree: Tree, node_id: str) -> Tree:
    """
    Remove a node and its subtree.

    Raises:
        ValidationError: Attempt to remove the root
        NotFoundError: Node does not exist
    """
    if tree.get("id") == node_id:
        raise ValidationError("Cannot remove root", [Issue("node.id", "root node cannot be removed")])
    result = copy.deepcopy(tree)
    parent = find_parent(result, node_id)
    if parent is None:
        raise NotFoundError("node", node_id)
    parent["children"] = [child for child in parent["children"] if child.get("id") != node_id]
    return result


def move_node(tree: Tree, node_id: str, new_parent_id: str, index: int | None = None) -> Tree:
    """
    Move a node under a new parent.

    Raises:
        ValidationError: Moving the root, or moving a node into its own subtree
        NotFoundError: Node or new parent does not exist
    """
    if tree.get("id") == node_id:
        raise ValidationError("Cannot move root", [Issue("node.id", "root node cannot be moved")])
    node = _require(tree, node_id)
    if find_node(node, new_parent_id) is not None:
        raise ValidationError(
            "Cannot move node into its own subtree",
            [Issue("parent.id", f"{new_parent_id} is inside {node_id}")],
        )
    _require(tree, new_parent_id)

    result = remove_node(tree, node_id)
    parent = _require(result, new_parent_id)
    children = parent.setdefault("children", [])
    position = len(children) if index is None else max(0, min(index, len(children)))
    children.insert(position, copy.deepcopy(node))
    return result


def update_node(tree: Tree, node_id: str, **fields: Any) -> Tree:
    """
    Replace fields on one node. A field set to None is removed.

    ``id`` and ``children`` cannot be changed here.
    """
    if "id" in fields or "children" in fields:
        raise ValidationError(
            "Cannot update id or children", [Issue("node", "use move_node or insert_node")]
        )
    result = copy.deepcopy(tree)
    node = _require(result, node_id)
    for name, value in fields.items():
        if value is None:
            node.pop(name, None)
        else:
            node[name] = copy.deepcopy(value)
    return result
