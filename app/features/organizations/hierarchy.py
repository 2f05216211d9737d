"""
Organization tree assembly.

Organizations are loaded as a flat list (one query, or one page of a larger
result). `build_hierarchy` turns that list into a forest of
`OrganizationNode`; the traversal helpers walk a forest with a visited set so
a bad parent chain fails with `CyclicHierarchyError` instead of looping.
"""
from collections import defaultdict
from collections.abc import Iterable, Iterator
from typing import Any

from app.features.organizations.schemas import OrganizationNode, OrganizationRecord
from app.utils import get_logger


log = get_logger(__name__)

_RECORD_FIELDS = set(OrganizationRecord.model_fields)


class CyclicHierarchyError(Exception):
    """Raised when parent references loop back on themselves."""

    def __init__(self, organization_ids: Iterable[str]):
        self.organization_ids = list(organization_ids)
        super().__init__(
            f"Cyclic organization hierarchy detected at: {', '.join(self.organization_ids)}"
        )


def _new_node(organization: Any) -> OrganizationNode:
    # Always a fresh node, even when handed an OrganizationNode from a previous build
    record = OrganizationRecord.model_validate(organization)
    return OrganizationNode(**record.model_dump(include=_RECORD_FIELDS))


def build_hierarchy(organizations: Iterable[Any]) -> list[OrganizationNode]:
    """
    Assemble organizations into a forest.

    Args:
        organizations: ORM rows, schemas or dicts exposing the organization
            attributes. Order is preserved for roots and siblings.

    Returns:
        Root nodes in input order. A record whose parent is missing from the
        input becomes a root with `is_orphaned=True`.

    Raises:
        ValueError: Two records share an ID.
        CyclicHierarchyError: Some records are only reachable through a
            parent cycle.
    """
    nodes: dict[str, OrganizationNode] = {}
    ordered: list[OrganizationNode] = []
    for organization in organizations:
        node = _new_node(organization)
        if node.id in nodes:
            raise ValueError(f"Duplicate organization id {node.id!r}")
        nodes[node.id] = node
        ordered.append(node)

    roots: list[OrganizationNode] = []
    for node in ordered:
        parent = nodes.get(node.parent_id) if node.parent_id is not None else None
        if parent is None:
            node.is_orphaned = node.parent_id is not None
            roots.append(node)
        else:
            parent.children.append(node)

    # Levels are assigned top-down after linking, so input order does not matter
    reached: set[str] = set()
    for node in walk(roots):
        reached.add(node.id)
        for child in node.children:
            child.level = node.level + 1

    if len(reached) != len(nodes):
        unreached = [node.id for node in ordered if node.id not in reached]
        log.warning("Organizations unreachable from any root: %s", unreached)
        raise CyclicHierarchyError(unreached)

    log.debug("Built hierarchy of %d organizations with %d roots", len(nodes), len(roots))
    return roots


def walk(roots: Iterable[OrganizationNode]) -> Iterator[OrganizationNode]:
    """Depth-first pre-order traversal. Raises CyclicHierarchyError on a revisit."""
    visited: set[str] = set()
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        if node.id in visited:
            raise CyclicHierarchyError([node.id])
        visited.add(node.id)
        yield node
        stack.extend(reversed(node.children))


def flatten(roots: Iterable[OrganizationNode]) -> list[OrganizationNode]:
    return list(walk(roots))


def count_nodes(roots: Iterable[OrganizationNode]) -> int:
    return sum(1 for _ in walk(roots))


def descendant_ids(organizations: Iterable[Any], organization_id: str) -> list[str]:
    """
    Get an organization ID followed by the IDs of every organization below it.

    Children are listed depth-first in input order. The starting ID is
    returned even when it is not among `organizations`.
    """
    children_by_parent: dict[str | None, list[str]] = defaultdict(list)
    for organization in organizations:
        record = OrganizationRecord.model_validate(organization)
        children_by_parent[record.parent_id].append(record.id)

    result: list[str] = []
    visited: set[str] = set()
    stack = [organization_id]
    while stack:
        current = stack.pop()
        if current in visited:
            raise CyclicHierarchyError([current])
        visited.add(current)
        result.append(current)
        stack.extend(reversed(children_by_parent.get(current, [])))
    return result
