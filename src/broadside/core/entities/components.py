"""Component-based entity system for combatants.

Entities are composed of discrete, focused components that each own one
aspect of a combatant's battle state (stats, health, morale, turn counters,
status effects).
"""

from abc import ABC, abstractmethod
from typing import Optional
import uuid

from ..data.game_enums import ComponentType


class Component(ABC):
    """Base class for all components in the system.

    Components contain both data and the methods that mutate it.
    """

    def __init__(self, entity: "Entity"):
        """Initialize component with reference to owning entity.

        Args:
            entity: The entity this component belongs to
        """
        self.entity = entity

    @abstractmethod
    def get_component_type(self) -> ComponentType:
        """Get the type identifier for this component."""
        pass


class Entity:
    """Container for components that together define a combatant.

    An entity is a unique ID plus a collection of components keyed by
    their ComponentType.
    """

    def __init__(self, entity_id: Optional[str] = None):
        """Initialize entity with an ID and empty component collection.

        Args:
            entity_id: Stable identifier; a random UUID is used if omitted
        """
        self.entity_id: str = entity_id or str(uuid.uuid4())
        self.components: dict[ComponentType, Component] = {}

    def add_component(self, component: Component) -> None:
        """Add a component to this entity.

        Raises:
            DuplicateComponentError: If a component of this type already exists
        """
        component_type = component.get_component_type()
        if component_type in self.components:
            raise DuplicateComponentError(self.entity_id, component_type)

        self.components[component_type] = component

    def get_component(self, component_type: ComponentType) -> Optional[Component]:
        """Get a component by type, or None if absent."""
        return self.components.get(component_type)

    def require_component(self, component_type: ComponentType) -> Component:
        """Get a component by type, raising an error if it doesn't exist.

        Raises:
            MissingComponentError: If the component doesn't exist
        """
        component = self.components.get(component_type)
        if component is None:
            raise MissingComponentError(self.entity_id, component_type)
        return component

    def has_component(self, component_type: ComponentType) -> bool:
        return component_type in self.components

    def remove_component(self, component_type: ComponentType) -> Optional[Component]:
        """Remove a component from this entity, returning it if it existed."""
        return self.components.pop(component_type, None)


class ComponentError(Exception):
    """Base exception for component system errors."""
    pass


class MissingComponentError(ComponentError):
    """Raised when trying to access a component that doesn't exist."""

    def __init__(self, entity_id: str, component_type: ComponentType):
        super().__init__(f"Entity {entity_id} missing component: {component_type}")
        self.entity_id = entity_id
        self.component_type = component_type


class DuplicateComponentError(ComponentError):
    """Raised when trying to add a component that already exists."""

    def __init__(self, entity_id: str, component_type: ComponentType):
        super().__init__(f"Entity {entity_id} already has component: {component_type}")
        self.entity_id = entity_id
        self.component_type = component_type
