"""
Client-side mirror of a server-owned collection.

Serves both shapes of collection used by the storefront screens:

- Tree collections (categories), where entities reference a parent and
  children are fetched lazily the first time a node is expanded.
- Flat collections (addresses, payment methods), where at most one entity
  carries the default flag.

The cache is owned by a single screen/session and runs on one event loop, so
it needs no locking. State is only replaced after an awaited fetch has
completed, which means queries issued while a fetch is outstanding always see
the last-known-good state.
"""
import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator, Mapping
from typing import Any

from schemas.entity import Entity

logger = logging.getLogger(__name__)

EntityLike = Entity | Mapping[str, Any]
FetchAll = Callable[[], Awaitable[Iterable[EntityLike]]]
FetchChildren = Callable[[str], Awaitable[Iterable[EntityLike]]]


def _coerce(item: EntityLike) -> Entity:
    """Accept either a validated Entity or a raw API record."""
    if isinstance(item, Entity):
        return item
    return Entity.model_validate(item)


class HierarchicalCollectionCache:
    """
    De-duplicated, lazily-expanded mirror of a server collection.

    Mutating operations other than `load` and `ensure_children_loaded` are
    meant to be called only after the server has confirmed the change. Errors
    raised by fetch callables propagate unchanged and leave the cache as it
    was.
    """

    def __init__(self, entities: Iterable[EntityLike] = ()) -> None:
        self._entities: dict[str, Entity] = {}
        self._expanded: set[str] = set()
        for item in entities:
            entity = _coerce(item)
            self._entities.setdefault(entity.id, entity)

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    @property
    def expanded(self) -> frozenset[str]:
        """Ids of nodes currently toggled open."""
        return frozenset(self._expanded)

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    async def load(self, fetch_all: FetchAll) -> None:
        """
        Replace the cached collection with a fresh fetch.

        Used for the initial population and for pull-to-refresh. This is the
        reconciliation point for optimistic updates: the server's answer
        replaces everything.

        Args:
            fetch_all: Zero-argument async callable returning the collection.

        Raises:
            Whatever `fetch_all` raises. The cache is left unchanged.
        """
        fetched = await fetch_all()
        entities = self._index(fetched)
        self._entities = entities
        # Drop open state for nodes the server no longer returns
        self._expanded &= entities.keys()
        logger.debug("collection_loaded count=%s", len(entities))

    async def ensure_children_loaded(
        self,
        parent_id: str,
        fetch_children: FetchChildren,
    ) -> int:
        """
        Fetch the children of `parent_id` unless some are already cached.

        Children are fetched at most once per parent for the lifetime of the
        cache; collapsing and re-opening a node never refetches. Fetched
        records whose id is already cached are skipped, so a root record's
        richer list representation survives being fetched again as a child.

        Two overlapping calls for the same parent may both fetch. The merge is
        keyed by id, so the result is the same as a single fetch.

        Args:
            parent_id: Parent whose children should be present.
            fetch_children: Async callable returning the parent's children.

        Returns:
            Number of entities added to the cache (0 if no fetch was needed).

        Raises:
            Whatever `fetch_children` raises. The cache is left unchanged.
        """
        if self.has_children(parent_id):
            logger.debug("children_cache_hit parent_id=%s", parent_id)
            return 0

        logger.debug("children_cache_miss parent_id=%s", parent_id)
        children = await fetch_children(parent_id)
        added = self.merge(children)
        logger.debug("children_loaded parent_id=%s added=%s", parent_id, added)
        return added

    def merge(self, items: Iterable[EntityLike]) -> int:
        """
        Add entities whose ids are not cached yet.

        Already-cached entities win over incoming ones. All records are
        validated before anything is added.

        Returns:
            Number of entities added.
        """
        incoming = self._index(items)
        new = {k: v for k, v in incoming.items() if k not in self._entities}
        if new:
            self._entities = {**self._entities, **new}
        return len(new)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, entity_id: str) -> Entity | None:
        """Get a cached entity by id."""
        return self._entities.get(entity_id)

    def get_roots(self) -> list[Entity]:
        """Entities without a parent, in insertion order."""
        return [e for e in self._entities.values() if e.parent_id is None]

    def get_children(self, parent_id: str) -> list[Entity]:
        """Cached direct children of `parent_id`, in insertion order. Never fetches."""
        return [e for e in self._entities.values() if e.parent_id == parent_id]

    def has_children(self, parent_id: str) -> bool:
        """True if at least one child of `parent_id` is cached."""
        return any(e.parent_id == parent_id for e in self._entities.values())

    def get_default(self) -> Entity | None:
        """
        The entity to preselect in a flat collection.

        Returns the entity flagged as default, falling back to the first
        cached entity, or None if the collection is empty.
        """
        for entity in self._entities.values():
            if entity.is_default is True:
                return entity
        return next(iter(self._entities.values()), None)

    def parent_name(
        self,
        parent_id: str | None,
        name_field: str = "name",
        root_label: str = "Root",
    ) -> str:
        """
        Display label for a parent reference.

        Returns `root_label` for roots, the parent's `name_field` if it is
        cached, and the raw id otherwise.
        """
        if not parent_id:
            return root_label
        parent = self._entities.get(parent_id)
        if parent is None:
            return parent_id
        name = getattr(parent, name_field, None)
        return str(name) if name is not None else parent_id

    def walk(self) -> list[tuple[int, Entity]]:
        """
        Flatten the visible tree depth-first.

        Returns `(depth, entity)` for every root and, below each expanded node,
        its cached children. Collapsed nodes hide their subtree. Entities
        caught in a parent cycle are unreachable from any root and are never
        visited.
        """
        visible: list[tuple[int, Entity]] = []
        stack: list[tuple[int, Entity]] = [(0, e) for e in reversed(self.get_roots())]
        while stack:
            depth, entity = stack.pop()
            visible.append((depth, entity))
            if entity.id in self._expanded:
                children = self.get_children(entity.id)
                stack.extend((depth + 1, c) for c in reversed(children))
        return visible

    # -------------------------------------------------------------------------
    # Expand / collapse
    # -------------------------------------------------------------------------

    def is_expanded(self, entity_id: str) -> bool:
        """True if the node is toggled open."""
        return entity_id in self._expanded

    def toggle_expanded(self, entity_id: str) -> bool:
        """
        Flip a node between open and closed.

        Never fetches: callers opening a node should await
        `ensure_children_loaded` first, so collapsing stays instantaneous.

        Returns:
            True if the node is now open.
        """
        if entity_id in self._expanded:
            self._expanded.discard(entity_id)
            return False
        self._expanded.add(entity_id)
        return True

    # -------------------------------------------------------------------------
    # Reconciling confirmed mutations
    # -------------------------------------------------------------------------

    def upsert(self, item: EntityLike) -> Entity:
        """Insert or overwrite an entity by id."""
        entity = _coerce(item)
        self._entities = {**self._entities, entity.id: entity}
        return entity

    def upsert_flat(self, item: EntityLike) -> Entity:
        """
        Insert or overwrite an entity in a flat collection.

        If the entity is the new default, every other cached entity loses its
        default flag in the same update, ahead of the next full reload.
        """
        entity = _coerce(item)
        entities = dict(self._entities)
        if entity.is_default is True:
            for other_id, other in entities.items():
                if other_id != entity.id and other.is_default is True:
                    entities[other_id] = other.model_copy(update={"is_default": False})
                    logger.debug("default_cleared id=%s new_default=%s", other_id, entity.id)
        entities[entity.id] = entity
        self._entities = entities
        return entity

    def remove(self, entity_id: str) -> list[str]:
        """
        Remove an entity and all of its cached descendants.

        A malformed parent graph never loops: an id reached twice is logged as
        a data-integrity warning and not traversed again.

        Returns:
            Ids that were removed, the entity itself first.
        """
        if entity_id not in self._entities:
            return []

        removed: list[str] = []
        visited: set[str] = set()
        pending = [entity_id]
        while pending:
            current = pending.pop()
            if current in visited:
                logger.warning("collection_cycle_detected id=%s", current)
                continue
            visited.add(current)
            removed.append(current)
            pending.extend(e.id for e in self._entities.values() if e.parent_id == current)

        self._entities = {k: v for k, v in self._entities.items() if k not in visited}
        self._expanded -= visited
        logger.debug("collection_removed id=%s count=%s", entity_id, len(removed))
        return removed

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _index(items: Iterable[EntityLike]) -> dict[str, Entity]:
        """Validate records and key them by id, keeping the first of any duplicates."""
        indexed: dict[str, Entity] = {}
        for item in items:
            entity = _coerce(item)
            if entity.id in indexed:
                logger.warning("collection_duplicate_id id=%s", entity.id)
                continue
            indexed[entity.id] = entity
        return indexed
