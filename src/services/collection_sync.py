"""Service layer tying a collection cache to its server resource."""
import logging
from typing import Any, Generic, TypeVar

from schemas.entity import Entity
from services.collection_cache import HierarchicalCollectionCache
from storefront_api.resources import CollectionSource, Payload

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=Entity)


class SyncedCollection(Generic[EntityT]):
    """
    A cached collection kept in step with the server.

    Every mutation is sent to the server first; the cache is only updated
    once the server has confirmed it, so a failed mutation never leaves local
    state to roll back. Errors from the source propagate unchanged.

    Args:
        source: Server side of the collection.
        flat: True for selectable-default collections (addresses, payment
            methods), False for trees (categories).
        cache: Existing cache to reuse. A new one is created by default.
    """

    def __init__(
        self,
        source: CollectionSource[EntityT],
        flat: bool,
        cache: HierarchicalCollectionCache | None = None,
    ) -> None:
        self.source = source
        self.flat = flat
        self.cache = cache if cache is not None else HierarchicalCollectionCache()

    async def refresh(self) -> None:
        """Reload the whole collection. The server's answer replaces local state."""
        await self.cache.load(self.source.fetch_all)

    async def ensure_roots_loaded(self) -> int:
        """
        Make sure top-level entities are available, e.g. for a parent picker.

        Fetches roots only if none are cached. Returns the number added.
        """
        if self.cache.get_roots():
            return 0
        roots = await self.source.fetch_roots()
        return self.cache.merge(roots)

    async def expand(self, entity_id: str) -> bool:
        """
        Open a node, loading its children first if needed.

        If the children fetch fails, the node stays closed and the error
        propagates, so the next attempt retries the fetch.

        Returns:
            True (the node is open).
        """
        if self.flat:
            raise ValueError("Only tree collections can be expanded")
        if self.cache.is_expanded(entity_id):
            return True
        await self.cache.ensure_children_loaded(entity_id, self.source.fetch_children)
        return self.cache.toggle_expanded(entity_id)

    async def toggle(self, entity_id: str) -> bool:
        """
        Open a closed node or close an open one.

        Closing never touches the network.

        Returns:
            True if the node is now open.
        """
        if self.cache.is_expanded(entity_id):
            return self.cache.toggle_expanded(entity_id)
        return await self.expand(entity_id)

    async def create(self, payload: Payload) -> EntityT | None:
        """
        Create an entity on the server, then add it to the cache.

        If the server confirms without returning the record, the collection is
        reloaded instead and None is returned.
        """
        entity = await self.source.create(payload)
        if entity is None:
            logger.debug("collection_created_without_record")
            await self.refresh()
            return None
        self._reconcile(entity)
        logger.debug("collection_created id=%s", entity.id)
        return entity

    async def update(self, entity_id: str, payload: Payload) -> EntityT | None:
        """
        Update an entity on the server, then overwrite the cached copy.

        If the server confirms without returning the record, the collection is
        reloaded instead and the reloaded entity is returned.
        """
        entity = await self.source.update(entity_id, payload)
        if entity is None:
            logger.debug("collection_updated_without_record id=%s", entity_id)
            await self.refresh()
            return self.cache.get(entity_id)  # type: ignore[return-value]
        self._reconcile(entity)
        logger.debug("collection_updated id=%s", entity.id)
        return entity

    async def delete(self, entity_id: str) -> list[str]:
        """
        Delete an entity on the server, then drop it from the cache.

        Descendants are dropped with it. Returns the removed ids.
        """
        await self.source.delete(entity_id)
        return self.cache.remove(entity_id)

    async def set_default(self, entity_id: str) -> EntityT | None:
        """Mark an entity as the default of a flat collection."""
        if not self.flat:
            raise ValueError("Only flat collections have a default entity")
        return await self.update(entity_id, {"isDefault": True})

    def default(self) -> Entity | None:
        """The entity to preselect: the default, else the first one."""
        return self.cache.get_default()

    def _reconcile(self, entity: Any) -> None:
        if self.flat:
            self.cache.upsert_flat(entity)
        else:
            self.cache.upsert(entity)
