"""
Entity-Component-System Core
=============================
Integer entity IDs with one component dictionary per component type.

The world behaves like an index-stable arena: entities are iterated in
creation order, destruction only marks an entity inactive, and the marked
entities are removed in a single compaction pass at the end of a frame.
"""

from typing import Dict, Type, TypeVar, Optional, Iterator, Tuple, Any


C = TypeVar('C')


class World:
    """
    Owns every entity and its components.

    Component stores are insertion-ordered dicts keyed by entity ID, so
    queries always visit entities in the order they were created.
    """

    def __init__(self):
        self._next_entity_id: int = 0
        self._entities: Dict[int, None] = {}
        self._components: Dict[Type, Dict[int, Any]] = {}
        self._inactive: Dict[int, None] = {}

    def create_entity(self) -> int:
        """Create a new entity and return its ID."""
        entity_id = self._next_entity_id
        self._next_entity_id += 1
        self._entities[entity_id] = None
        return entity_id

    def destroy_entity(self, entity_id: int) -> bool:
        """
        Mark an entity inactive. Storage is reclaimed by compact().

        Returns True only on the call that actually flipped the entity
        from active to inactive.
        """
        if not self.is_alive(entity_id):
            return False
        self._inactive[entity_id] = None
        return True

    def compact(self) -> int:
        """Drop all inactive entities and their components. Returns the count."""
        removed = 0
        for entity_id in self._inactive:
            if entity_id in self._entities:
                del self._entities[entity_id]
                removed += 1
            for store in self._components.values():
                store.pop(entity_id, None)
        self._inactive.clear()
        return removed

    def clear(self) -> None:
        """Remove every entity. IDs keep increasing so stale IDs never alias."""
        self._entities.clear()
        self._components.clear()
        self._inactive.clear()

    def add_component(self, entity_id: int, component: Any) -> None:
        """Add (or replace) a component on an entity."""
        self._components.setdefault(type(component), {})[entity_id] = component

    def remove_component(self, entity_id: int, component_type: Type[C]) -> None:
        store = self._components.get(component_type)
        if store is not None:
            store.pop(entity_id, None)

    def get_component(self, entity_id: int, component_type: Type[C]) -> Optional[C]:
        """Get a component for an entity, or None if not found."""
        store = self._components.get(component_type)
        if store is None:
            return None
        return store.get(entity_id)

    def has_component(self, entity_id: int, component_type: Type) -> bool:
        store = self._components.get(component_type)
        return store is not None and entity_id in store

    def query(self, *component_types: Type) -> Iterator[Tuple[Any, ...]]:
        """
        Yield (entity_id, component1, component2, ...) for every active
        entity carrying ALL of the given component types.

        The candidate list is snapshotted before iteration, so systems may
        create or destroy entities while consuming the query. Entities
        destroyed mid-iteration are skipped from that point on.
        """
        if not component_types:
            return

        stores = []
        for component_type in component_types:
            store = self._components.get(component_type)
            if not store:
                return
            stores.append(store)

        first, rest = stores[0], stores[1:]
        candidates = [eid for eid in first if all(eid in s for s in rest)]

        for entity_id in candidates:
            if entity_id in self._inactive:
                continue
            if any(entity_id not in s for s in stores):
                continue
            yield (entity_id,) + tuple(s[entity_id] for s in stores)

    def get_entities_with(self, *component_types: Type) -> Iterator[int]:
        """Get all active entity IDs that have all specified components."""
        for result in self.query(*component_types):
            yield result[0]

    def first(self, *component_types: Type) -> Optional[int]:
        """ID of the oldest active entity with the given components, or None."""
        for result in self.query(*component_types):
            return result[0]
        return None

    def count(self, *component_types: Type) -> int:
        return sum(1 for _ in self.query(*component_types))

    def entity_count(self) -> int:
        """Return the number of active entities."""
        return len(self._entities) - len(self._inactive)

    def is_alive(self, entity_id: int) -> bool:
        """True while the entity exists and has not been marked inactive."""
        return entity_id in self._entities and entity_id not in self._inactive
