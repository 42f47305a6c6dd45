"""Button platform for Roast Advisor integration."""
from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from homeassistant.components.button import ButtonEntity, ButtonEntityDescription
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN, VERSION
from .coordinator import RoastCoordinator

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback
    from . import RoastConfigEntry


@dataclass(frozen=True, kw_only=True)
class RoastButtonDescription(ButtonEntityDescription):
    """Describes a session shortcut button."""
    press_fn: Callable[[RoastCoordinator], Awaitable[None]]


BUTTONS: tuple[RoastButtonDescription, ...] = (
    RoastButtonDescription(
        key="log_oven_off",
        translation_key="log_oven_off",
        icon="mdi:stove",
        press_fn=lambda coordinator: coordinator.async_log_oven_off(),
    ),
    RoastButtonDescription(
        key="end_session",
        translation_key="end_session",
        icon="mdi:stop-circle-outline",
        press_fn=lambda coordinator: coordinator.async_end_session(),
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: RoastConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: RoastCoordinator = entry.runtime_data
    async_add_entities(RoastButton(coordinator, description) for description in BUTTONS)


class RoastButton(CoordinatorEntity[RoastCoordinator], ButtonEntity):
    """Shortcut for a session command."""

    _attr_has_entity_name = True
    entity_description: RoastButtonDescription

    def __init__(self, coordinator: RoastCoordinator, description: RoastButtonDescription) -> None:
        super().__init__(coordinator)
        self.entity_description = description
        entry_id = coordinator.entry.entry_id
        self._attr_unique_id = f"{entry_id}_{description.key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry_id)},
            name=coordinator.device_name,
            manufacturer="Roast Advisor",
            model="Slow Roast Advisor",
            sw_version=VERSION,
        )

    @property
    def available(self) -> bool:
        """Only while a session is active."""
        return super().available and self.coordinator.data.active

    async def async_press(self) -> None:
        await self.entity_description.press_fn(self.coordinator)
