"""
Session Snapshot Schemas.

Pydantic models for the grid state kept by the session store: grid
calibration, the sparse "x,y" cell state map and the persistent zones.
Field names follow the store's camelCase keys; snake_case names are
accepted as well.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional, Tuple

from battlegrid.core.errors import InvalidCellKeyError
from battlegrid.core.grid import (
    AreaShape,
    CellCoordinate,
    CellState,
    CellStateMap,
    GridConfig,
    GridType,
    format_cell_key,
    parse_cell_key,
)
from battlegrid.core.zones import (
    DamageType,
    PersistentZone,
    SaveAbility,
    ZoneDamage,
    ZoneEffect,
    ZoneEffectType,
    ZoneSave,
    ZoneTrigger,
)


class SnapshotModel(BaseModel):
    """Base for session store schemas."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# GRID CONFIGURATION
# =============================================================================

class GridConfigSchema(SnapshotModel):
    """Stored grid calibration."""
    grid_type: GridType = Field(default=GridType.SQUARE, description="square or none")
    cell_size: float = Field(default=50, gt=0, description="Cell edge in pixels")
    offset_x: float = Field(default=0, description="Grid origin offset in pixels")
    offset_y: float = Field(default=0, description="Grid origin offset in pixels")
    map_width: float = Field(default=1000, ge=0, description="Map image width in pixels")
    map_height: float = Field(default=1000, ge=0, description="Map image height in pixels")
    feet_per_cell: int = Field(default=5, gt=0, description="Feet per cell")

    def to_engine(self) -> GridConfig:
        return GridConfig(
            cell_size=self.cell_size,
            map_width=self.map_width,
            map_height=self.map_height,
            offset_x=self.offset_x,
            offset_y=self.offset_y,
            grid_type=self.grid_type,
            feet_per_cell=self.feet_per_cell
        )

    @classmethod
    def from_engine(cls, config: GridConfig) -> "GridConfigSchema":
        return cls(
            grid_type=config.grid_type,
            cell_size=config.cell_size,
            offset_x=config.offset_x,
            offset_y=config.offset_y,
            map_width=config.map_width,
            map_height=config.map_height,
            feet_per_cell=config.feet_per_cell
        )


# =============================================================================
# ZONES
# =============================================================================

class ZoneDamageSchema(SnapshotModel):
    """Stored zone damage."""
    dice_expression: str = Field(description="Dice to roll, e.g. 2d6")
    damage_type: DamageType


class ZoneSaveSchema(SnapshotModel):
    """Stored zone saving throw."""
    ability: SaveAbility
    dc: int = Field(ge=1)
    on_success: Optional[str] = None
    on_failure: Optional[str] = None


class ZoneEffectSchema(SnapshotModel):
    """Stored zone effect."""
    id: str = ""
    type: ZoneEffectType
    trigger: Optional[ZoneTrigger] = None
    damage: Optional[ZoneDamageSchema] = None
    save: Optional[ZoneSaveSchema] = None
    custom_description: Optional[str] = None

    def to_engine(self) -> ZoneEffect:
        return ZoneEffect(
            id=self.id,
            type=self.type,
            trigger=self.trigger,
            damage=ZoneDamage(**self.damage.model_dump()) if self.damage else None,
            save=ZoneSave(**self.save.model_dump()) if self.save else None,
            custom_description=self.custom_description
        )

    @classmethod
    def from_engine(cls, effect: ZoneEffect) -> "ZoneEffectSchema":
        damage = None
        if effect.damage is not None:
            damage = ZoneDamageSchema(
                dice_expression=effect.damage.dice_expression,
                damage_type=effect.damage.damage_type
            )
        save = None
        if effect.save is not None:
            save = ZoneSaveSchema(
                ability=effect.save.ability,
                dc=effect.save.dc,
                on_success=effect.save.on_success,
                on_failure=effect.save.on_failure
            )
        return cls(
            id=effect.id,
            type=effect.type,
            trigger=effect.trigger,
            damage=damage,
            save=save,
            custom_description=effect.custom_description
        )


class PersistentZoneSchema(SnapshotModel):
    """Stored persistent zone."""
    id: str
    name: str
    shape: AreaShape
    origin_x: int
    origin_y: int
    size_feet: float = Field(ge=0)
    direction: Optional[float] = None
    effects: List[ZoneEffectSchema] = Field(default_factory=list)
    color: str = "#ff6600"
    opacity: float = Field(default=0.3, ge=0, le=1)
    duration_rounds: Optional[int] = Field(default=None, ge=0)
    current_round: Optional[int] = Field(default=None, ge=0)
    source_id: Optional[str] = None
    is_active: bool = True

    def to_engine(self) -> PersistentZone:
        return PersistentZone(
            id=self.id,
            name=self.name,
            shape=self.shape,
            origin_x=self.origin_x,
            origin_y=self.origin_y,
            size_feet=self.size_feet,
            direction=self.direction,
            effects=[effect.to_engine() for effect in self.effects],
            color=self.color,
            opacity=self.opacity,
            duration_rounds=self.duration_rounds,
            current_round=self.current_round,
            source_id=self.source_id,
            is_active=self.is_active
        )

    @classmethod
    def from_engine(cls, zone: PersistentZone) -> "PersistentZoneSchema":
        return cls(
            id=zone.id,
            name=zone.name,
            shape=zone.shape,
            origin_x=zone.origin_x,
            origin_y=zone.origin_y,
            size_feet=zone.size_feet,
            direction=zone.direction,
            effects=[ZoneEffectSchema.from_engine(effect) for effect in zone.effects],
            color=zone.color,
            opacity=zone.opacity,
            duration_rounds=zone.duration_rounds,
            current_round=zone.current_round,
            source_id=zone.source_id,
            is_active=zone.is_active
        )


# =============================================================================
# SNAPSHOT
# =============================================================================

class GridSnapshot(SnapshotModel):
    """Everything the engine needs from the session store for one map."""
    grid_config: GridConfigSchema = Field(default_factory=GridConfigSchema)
    cell_states: Dict[str, CellState] = Field(
        default_factory=dict,
        description="Sparse map of \"x,y\" keys to non-free cell states"
    )
    zones: List[PersistentZoneSchema] = Field(default_factory=list, alias="persistentZones")

    @field_validator("cell_states")
    @classmethod
    def validate_cell_keys(cls, value: Dict[str, CellState]) -> Dict[str, CellState]:
        normalized = {}
        for key, state in value.items():
            try:
                x, y = parse_cell_key(key)
            except InvalidCellKeyError as e:
                raise ValueError(e.message) from e
            normalized[format_cell_key(x, y)] = state
        return normalized

    def to_engine(self) -> Tuple[GridConfig, Dict[CellCoordinate, CellState], List[PersistentZone]]:
        """Convert to engine types: (config, cell state map, zones)."""
        cell_states = {
            parse_cell_key(key): state
            for key, state in self.cell_states.items()
        }
        return (
            self.grid_config.to_engine(),
            cell_states,
            [zone.to_engine() for zone in self.zones]
        )

    @classmethod
    def from_engine(
        cls,
        config: GridConfig,
        cell_states: CellStateMap,
        zones: Optional[List[PersistentZone]] = None
    ) -> "GridSnapshot":
        """
        Build a snapshot from engine types.

        Free cells are dropped; the store only keeps non-default states.
        """
        return cls(
            grid_config=GridConfigSchema.from_engine(config),
            cell_states={
                format_cell_key(x, y): state
                for (x, y), state in cell_states.items()
                if state != CellState.FREE
            },
            zones=[PersistentZoneSchema.from_engine(zone) for zone in zones or []]
        )
