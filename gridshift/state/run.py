from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Set

from gridshift.errors import InvalidSelection

if TYPE_CHECKING:
    from gridshift.config import GameConfig
    from gridshift.session import SessionOutcome

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    PUZZLE = "puzzle"
    ELITE = "elite"
    CHEST = "chest"
    CAMPFIRE = "campfire"
    BOSS = "boss"

    @property
    def has_puzzle(self) -> bool:
        return self in (NodeKind.PUZZLE, NodeKind.ELITE, NodeKind.BOSS)


@dataclass
class MapNode:
    id: int
    row: int
    col: int
    col_count: int  # width of this node's row
    kind: NodeKind
    connections: Set[int] = field(default_factory=set)  # ids in row + 1
    completed: bool = False


@dataclass
class MapGraph:
    nodes: List[MapNode]
    rows: List[List[int]]

    def node(self, node_id: int) -> MapNode:
        return self.nodes[node_id]

    def row_nodes(self, row: int) -> List[MapNode]:
        return [self.nodes[nid] for nid in self.rows[row]]

    @property
    def boss(self) -> MapNode:
        return self.nodes[self.rows[-1][0]]

    def incoming(self, node_id: int) -> Set[int]:
        return {n.id for n in self.nodes if node_id in n.connections}


RUN_WON = "won"
RUN_LOST = "lost"


@dataclass
class RunState:
    """Everything that survives between puzzle attempts within one run."""
    graph: MapGraph
    score: int = 0
    current_node_id: Optional[int] = None  # None = not yet started
    completed: Set[int] = field(default_factory=set)
    outcome: Optional[str] = None  # RUN_WON / RUN_LOST once the run is over

    @property
    def started(self) -> bool:
        return self.current_node_id is not None

    @property
    def over(self) -> bool:
        return self.outcome is not None

    @property
    def current_node(self) -> Optional[MapNode]:
        if self.current_node_id is None:
            return None
        return self.graph.node(self.current_node_id)

    def add_score(self, points: int) -> int:
        if points < 0:
            raise ValueError("run score never decreases")
        self.score += points
        return self.score

    def selectable_ids(self) -> FrozenSet[int]:
        if self.over:
            return frozenset()
        if self.current_node_id is None:
            return frozenset(self.graph.rows[0])
        node = self.graph.node(self.current_node_id)
        return frozenset(nid for nid in node.connections if nid not in self.completed)

    def select_node(self, node_id: int) -> MapNode:
        if node_id not in self.selectable_ids():
            raise InvalidSelection(f"node {node_id} is not selectable")
        self.current_node_id = node_id
        node = self.graph.node(node_id)
        logger.info("selected node %d (%s, row %d)", node.id, node.kind.value, node.row)
        return node

    def mark_completed(self, node: MapNode) -> None:
        node.completed = True
        self.completed.add(node.id)

    def resolve_instant(self, node: MapNode, cfg: "GameConfig") -> int:
        """Chest and campfire nodes pay out immediately, no puzzle."""
        if node.kind is NodeKind.CHEST:
            reward = cfg.chest_reward
        elif node.kind is NodeKind.CAMPFIRE:
            reward = cfg.campfire_reward
        else:
            raise ValueError(f"{node.kind.value} nodes are resolved by a puzzle session")
        self.add_score(reward)
        self.mark_completed(node)
        return reward

    def apply_session(self, node: MapNode, outcome: "SessionOutcome") -> None:
        """Fold a finished puzzle session back into the run."""
        from gridshift.session import SessionState

        self.add_score(max(0, outcome.score - self.score))
        if outcome.state is SessionState.WON:
            self.mark_completed(node)
            if node.kind is NodeKind.BOSS:
                self.outcome = RUN_WON
        elif outcome.state is SessionState.LOST:
            self.outcome = RUN_LOST
        logger.info(
            "node %d resolved: %s, run score %d%s",
            node.id, outcome.state.value, self.score,
            f", run {self.outcome}" if self.outcome else "",
        )
