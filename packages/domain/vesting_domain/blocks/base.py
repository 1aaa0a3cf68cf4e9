"""Report block pipeline.

A report is assembled from small Blocks that read engine state and earlier
DataFrames out of a shared BlockContext and write their own results back.
BlockExecutor orders the blocks by the keys they exchange and runs them.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# Block Context
# =============================================================================

class BlockContext:
    """Named values shared between blocks.

    Typical keys: "vesting_engine", "as_of", "projection_times" (seeded by
    the caller) and "allocation_ledger", "pool_summary", "unlock_projection"
    (written by blocks).
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        """Value stored under key.

        Raises:
            KeyError: If nothing has been stored under key
        """
        try:
            return self._values[key]
        except KeyError:
            raise KeyError(
                f"Key '{key}' not found in context (have: {sorted(self._values)})"
            ) from None

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def has(self, key: str) -> bool:
        return key in self._values

    def keys(self) -> List[str]:
        return list(self._values)


# =============================================================================
# Block Base Class
# =============================================================================

class Block(ABC):
    """One step of a report.

    Subclasses declare which context keys they consume and produce; the
    executor uses those declarations for ordering and checking.

    Example:
        class PoolCountBlock(Block):
            def inputs(self):
                return ["vesting_engine"]

            def outputs(self):
                return ["pool_count"]

            def execute(self, context):
                context.set("pool_count", len(context.get("vesting_engine").pools()))
    """

    @abstractmethod
    def inputs(self) -> List[str]:
        ...

    @abstractmethod
    def outputs(self) -> List[str]:
        ...

    @abstractmethod
    def execute(self, context: BlockContext) -> None:
        """Compute this block's outputs from its inputs."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(self.inputs())} -> {', '.join(self.outputs())})"


# =============================================================================
# Dependency Resolution
# =============================================================================

class CircularDependencyError(Exception):
    """Blocks consume each other's outputs in a cycle."""
    pass


def _producer_map(blocks: Iterable[Block]) -> Dict[str, Block]:
    producers: Dict[str, Block] = {}
    for block in blocks:
        for key in block.outputs():
            if key in producers:
                raise ValueError(
                    f"Multiple blocks produce '{key}': {producers[key]} and {block}"
                )
            producers[key] = block
    return producers


def topological_sort(blocks: List[Block]) -> List[Block]:
    """Order blocks so that each runs after the blocks producing its inputs.

    Inputs with no producer among blocks must be seeded into the context by
    the caller. Blocks with no mutual dependency keep their given order.

    Raises:
        ValueError: If two blocks produce the same key
        CircularDependencyError: If the dependencies form a cycle
    """
    producers = _producer_map(blocks)

    waiting_on = {id(block): 0 for block in blocks}
    consumers: Dict[int, List[Block]] = {id(block): [] for block in blocks}
    for block in blocks:
        for key in block.inputs():
            if key in producers:
                consumers[id(producers[key])].append(block)
                waiting_on[id(block)] += 1

    queue = deque(block for block in blocks if waiting_on[id(block)] == 0)
    ordered: List[Block] = []
    while queue:
        block = queue.popleft()
        ordered.append(block)
        for consumer in consumers[id(block)]:
            waiting_on[id(consumer)] -= 1
            if waiting_on[id(consumer)] == 0:
                queue.append(consumer)

    if len(ordered) < len(blocks):
        stuck = [block for block in blocks if waiting_on[id(block)]]
        raise CircularDependencyError(f"Circular dependency detected among blocks: {stuck}")
    return ordered


# =============================================================================
# Block Executor
# =============================================================================

class BlockExecutor:
    """Runs a set of blocks against a context.

    Example:
        context = BlockContext({"vesting_engine": engine, "as_of": engine.now()})
        BlockExecutor([AllocationLedgerBlock()]).execute(context)
        context.get("pool_summary")
    """

    def __init__(self, blocks: List[Block]):
        self.blocks = list(blocks)
        self._order: Optional[List[Block]] = None

    @property
    def order(self) -> List[Block]:
        if self._order is None:
            self._order = topological_sort(self.blocks)
        return self._order

    def execute(self, context: BlockContext) -> BlockContext:
        """Run every block in dependency order; returns the same context.

        Raises:
            CircularDependencyError: If the blocks depend on each other in a cycle
            KeyError: If a block's input is neither seeded nor produced
            ValueError: If a block does not write one of its outputs
        """
        for block in self.order:
            missing = [key for key in block.inputs() if not context.has(key)]
            if missing:
                raise KeyError(
                    f"Block {block} requires input '{missing[0]}' but it's not in context"
                )

            logger.debug("Running %r", block)
            block.execute(context)

            for key in block.outputs():
                if not context.has(key):
                    raise ValueError(
                        f"Block {block} declared output '{key}' but didn't write it to context"
                    )
        return context
