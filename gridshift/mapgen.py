"""Layered node-map generation for a run (Slay the Spire style)."""

import logging
from typing import List, Optional, Sequence, Tuple

from gridshift.config import GameConfig
from gridshift.state.run import MapGraph, MapNode, NodeKind

logger = logging.getLogger(__name__)

# Interior-row kind weights, cumulative in this order.
INTERIOR_WEIGHTS: Sequence[Tuple[NodeKind, int]] = (
    (NodeKind.PUZZLE, 50),
    (NodeKind.CHEST, 20),
    (NodeKind.CAMPFIRE, 15),
    (NodeKind.ELITE, 15),
)


def _weighted_kind(rng, table: Sequence[Tuple[NodeKind, int]]) -> NodeKind:
    total = sum(weight for _, weight in table)
    r = rng.random() * total
    for kind, weight in table:
        if r < weight:
            return kind
        r -= weight
    return table[-1][0]


def node_kind_for_row(row: int, total_rows: int, rng) -> NodeKind:
    # first row: always a plain puzzle
    if row == 0:
        return NodeKind.PUZZLE
    # last row before the boss: elite or puzzle
    if row == total_rows - 1:
        return NodeKind.ELITE if rng.random() < 0.5 else NodeKind.PUZZLE
    return _weighted_kind(rng, INTERIOR_WEIGHTS)


def generate_map(
    rng,
    rows: Optional[int] = None,
    min_nodes: Optional[int] = None,
    max_nodes: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
) -> MapGraph:
    """
    Build `rows` rows of 1..n nodes plus a single boss row.

    Edges go in two passes per row pair: every node first picks 1-2 random
    targets in the next row, then any next-row node still without an
    incoming edge gets one from a random node in the current row.
    """
    cfg = cfg or GameConfig()
    rows = cfg.map_rows if rows is None else rows
    min_nodes = cfg.map_min_nodes if min_nodes is None else min_nodes
    max_nodes = cfg.map_max_nodes if max_nodes is None else max_nodes
    if rows < 1 or not 1 <= min_nodes <= max_nodes:
        raise ValueError("map needs rows >= 1 and 1 <= min_nodes <= max_nodes")

    nodes: List[MapNode] = []
    layout: List[List[int]] = []

    for r in range(rows):
        count = rng.randint(min_nodes, max_nodes)
        row_ids: List[int] = []
        for c in range(count):
            node = MapNode(
                id=len(nodes),
                row=r,
                col=c,
                col_count=count,
                kind=node_kind_for_row(r, rows, rng),
            )
            nodes.append(node)
            row_ids.append(node.id)
        layout.append(row_ids)

    boss = MapNode(id=len(nodes), row=rows, col=0, col_count=1, kind=NodeKind.BOSS)
    nodes.append(boss)
    layout.append([boss.id])

    for r in range(len(layout) - 1):
        current_row = layout[r]
        next_row = layout[r + 1]

        # pass 1: forward edges
        for nid in current_row:
            conn_count = min(rng.randint(1, 2), len(next_row))
            nodes[nid].connections = set(rng.sample(next_row, conn_count))

        # pass 2: no orphans in the next row
        for nid in next_row:
            if not any(nid in nodes[cid].connections for cid in current_row):
                source = rng.choice(current_row)
                nodes[source].connections.add(nid)

    logger.debug(
        "generated map: %d nodes, row sizes %s",
        len(nodes), [len(row_ids) for row_ids in layout],
    )
    return MapGraph(nodes=nodes, rows=layout)
