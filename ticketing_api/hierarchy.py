from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Iterable

from ticketing_api.models import Category

logger = logging.getLogger(__name__)


def build_category_tree(categories: Iterable[Category]) -> list[Category]:
    """Assemble a flat list of categories into a forest.

    Every category with an id appears exactly once. Children keep the
    relative order of the input. A category becomes a root when its parent
    is null, unknown, itself, or when it is the entry point chosen to break
    a parent cycle.
    """
    nodes: dict[int, Category] = {}
    for category in categories:
        if category.id is None or category.id in nodes:
            continue
        nodes[category.id] = category.with_changes()

    cycle_breaks = _find_cycle_breaks(nodes)

    roots: list[Category] = []
    for node in nodes.values():
        parent_id = None if node.id in cycle_breaks else _linked_parent_id(node, nodes)
        if parent_id is None:
            if node.parent_id is not None and node.id not in cycle_breaks:
                logger.warning(
                    "Category %s has unresolvable parent %s; treating it as a root.",
                    node.id,
                    node.parent_id,
                )
            roots.append(node)
        else:
            nodes[parent_id].children.append(node)

    return roots


def resolve_descendant_ids(
    edges: Iterable[tuple[int, int | None]], start_ids: Iterable[int]
) -> set[int]:
    """Return every id reachable from ``start_ids`` by following parent->child links.

    ``edges`` holds ``(child_id, parent_id)`` pairs. A start id is only part of
    the result when it is itself a descendant of some start id.
    """
    children_by_parent: dict[int, list[int]] = defaultdict(list)
    for child_id, parent_id in edges:
        if parent_id is not None:
            children_by_parent[parent_id].append(child_id)

    expanded = set(start_ids)
    queue = deque(expanded)
    descendants: set[int] = set()
    while queue:
        current = queue.popleft()
        for child_id in children_by_parent.get(current, ()):
            descendants.add(child_id)
            if child_id not in expanded:
                expanded.add(child_id)
                queue.append(child_id)

    return descendants


def collect_subtree_ids(root: Category) -> list[int]:
    """Pre-order ids of ``root`` and everything below it in an assembled tree."""
    ids: list[int] = []
    stack = [root]
    while stack:
        node = stack.pop()
        ids.append(node.id)
        stack.extend(reversed(node.children))
    return ids


def _linked_parent_id(node: Category, nodes: dict[int, Category]) -> int | None:
    parent_id = node.parent_id
    if parent_id is None or parent_id == node.id or parent_id not in nodes:
        return None
    return parent_id


def _find_cycle_breaks(nodes: dict[int, Category]) -> set[int]:
    # For each cycle, the member that came first in the input is detached
    # from its parent. ``nodes`` preserves input order.
    position = {node_id: index for index, node_id in enumerate(nodes)}
    breaks: set[int] = set()
    settled: set[int] = set()

    for start in nodes:
        path: list[int] = []
        on_path: set[int] = set()
        current: int | None = start
        while current is not None and current not in settled:
            if current in on_path:
                cycle = path[path.index(current):]
                entry = min(cycle, key=position.__getitem__)
                logger.warning(
                    "Parent cycle detected among categories %s; detaching %s.",
                    sorted(cycle),
                    entry,
                )
                breaks.add(entry)
                break
            path.append(current)
            on_path.add(current)
            current = _linked_parent_id(nodes[current], nodes)
        settled.update(path)

    return breaks
