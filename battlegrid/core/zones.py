"""
Persistent Zones.

Named area effects that stay on the map for a number of rounds: spell
areas that create difficult terrain, deal damage or force saving throws.

The zone list is owned by the caller. Every function here is pure: it
reads a snapshot and returns new values, and round advancement only
happens when the caller's turn logic asks for it.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Sequence, Set, Tuple
import logging
import uuid

from battlegrid.core.area_of_effect import calculate_affected_cells
from battlegrid.core.grid import (
    AffectedCell,
    AreaOfEffect,
    AreaShape,
    CellState,
    CellStateMap,
    GridConfig,
    get_cell_state,
)

logger = logging.getLogger(__name__)


class ZoneTrigger(str, Enum):
    """When a zone effect activates."""
    ON_ENTER = "on_enter"
    ON_START_TURN = "on_start_turn"
    ON_END_TURN = "on_end_turn"


class ZoneEffectType(str, Enum):
    """Kinds of zone effects."""
    DIFFICULT_TERRAIN = "difficult_terrain"
    DAMAGE = "damage"
    SAVING_THROW = "saving_throw"
    CUSTOM = "custom"


class DamageType(str, Enum):
    """Damage types."""
    ACID = "acid"
    BLUDGEONING = "bludgeoning"
    COLD = "cold"
    FIRE = "fire"
    FORCE = "force"
    LIGHTNING = "lightning"
    NECROTIC = "necrotic"
    PIERCING = "piercing"
    POISON = "poison"
    PSYCHIC = "psychic"
    RADIANT = "radiant"
    SLASHING = "slashing"
    THUNDER = "thunder"


class SaveAbility(str, Enum):
    """Abilities used for saving throws."""
    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    INTELLIGENCE = "intelligence"
    WISDOM = "wisdom"
    CHARISMA = "charisma"


@dataclass
class ZoneDamage:
    """Damage dealt by a zone effect. Dice are resolved by the caller."""
    dice_expression: str  # e.g. "2d6"
    damage_type: DamageType


@dataclass
class ZoneSave:
    """Saving throw forced by a zone effect."""
    ability: SaveAbility
    dc: int
    on_success: Optional[str] = None  # e.g. "half damage"
    on_failure: Optional[str] = None


@dataclass
class ZoneEffect:
    """A single effect carried by a zone."""
    type: ZoneEffectType
    id: str = ""
    trigger: Optional[ZoneTrigger] = None
    damage: Optional[ZoneDamage] = None
    save: Optional[ZoneSave] = None
    custom_description: Optional[str] = None

    def matches_trigger(self, trigger: ZoneTrigger) -> bool:
        """
        Check if this effect fires for a trigger.

        Damage effects without an explicit trigger fire on entry.
        """
        if self.trigger is not None:
            return self.trigger == trigger
        return self.type == ZoneEffectType.DAMAGE and trigger == ZoneTrigger.ON_ENTER


# Zone display defaults
DEFAULT_ZONE_COLOR = "#ff6600"
DEFAULT_ZONE_OPACITY = 0.3

DAMAGE_ZONE_COLORS: Dict[DamageType, str] = {
    DamageType.FIRE: "#ff4400",
    DamageType.COLD: "#00ccff",
    DamageType.ACID: "#00ff00",
}
DAMAGE_ZONE_DEFAULT_COLOR = "#ff00ff"


@dataclass
class PersistentZone:
    """
    An area effect that persists on the map.

    duration_rounds of None means the zone lasts until removed.
    """
    id: str
    name: str
    shape: AreaShape
    origin_x: int
    origin_y: int
    size_feet: float
    direction: Optional[float] = None  # Degrees, for cones, lines and cubes
    effects: List[ZoneEffect] = field(default_factory=list)
    color: str = DEFAULT_ZONE_COLOR
    opacity: float = DEFAULT_ZONE_OPACITY
    duration_rounds: Optional[int] = None
    current_round: Optional[int] = None
    source_id: Optional[str] = None  # Caster or source of the zone
    is_active: bool = True

    def has_effect(self, effect_type: ZoneEffectType) -> bool:
        return any(effect.type == effect_type for effect in self.effects)

    def to_area(self) -> AreaOfEffect:
        """The area of effect template this zone covers."""
        return AreaOfEffect(
            shape=self.shape,
            origin_x=self.origin_x,
            origin_y=self.origin_y,
            size_feet=self.size_feet,
            direction=self.direction
        )


class TriggeredEffect(NamedTuple):
    """A zone effect that fires for a cell."""
    zone: PersistentZone
    effect: ZoneEffect


class ZoneRoundResult(NamedTuple):
    """Zones after a round has elapsed."""
    active_zones: List[PersistentZone]
    expired_zones: List[PersistentZone]


# ============================================================================
# QUERIES
# ============================================================================

def get_zone_affected_cells(zone: PersistentZone, config: GridConfig) -> List[AffectedCell]:
    """Calculate which cells a zone covers."""
    return calculate_affected_cells(zone.to_area(), config)


def _zone_covers(zone: PersistentZone, x: int, y: int, config: GridConfig) -> bool:
    return any(c.x == x and c.y == y for c in get_zone_affected_cells(zone, config))


def is_cell_in_zone_with_effect(
    x: int,
    y: int,
    effect_type: ZoneEffectType,
    zones: Sequence[PersistentZone],
    config: GridConfig
) -> Optional[PersistentZone]:
    """
    Find the first active zone covering a cell with an effect of a given type.

    Returns:
        The zone, or None if no active zone applies
    """
    for zone in zones:
        if not zone.is_active or not zone.has_effect(effect_type):
            continue
        if _zone_covers(zone, x, y, config):
            return zone
    return None


def get_zones_at_cell(
    x: int,
    y: int,
    zones: Sequence[PersistentZone],
    config: GridConfig
) -> List[PersistentZone]:
    """Get all active zones covering a cell."""
    return [
        zone for zone in zones
        if zone.is_active and _zone_covers(zone, x, y, config)
    ]


def get_triggered_effects(
    x: int,
    y: int,
    trigger: ZoneTrigger,
    zones: Sequence[PersistentZone],
    config: GridConfig
) -> List[TriggeredEffect]:
    """
    Get every zone effect that fires for a cell at a given moment.

    Args:
        x, y: Cell of the creature
        trigger: The moment being resolved (entering, turn start, turn end)
        zones: Zone list snapshot
        config: Grid configuration

    Returns:
        (zone, effect) pairs in zone order, then effect order
    """
    triggered = []
    for zone in get_zones_at_cell(x, y, zones, config):
        for effect in zone.effects:
            if effect.matches_trigger(trigger):
                triggered.append(TriggeredEffect(zone=zone, effect=effect))
    return triggered


def is_cell_difficult_from_zone(
    x: int,
    y: int,
    zones: Sequence[PersistentZone],
    config: GridConfig
) -> bool:
    """Check if a zone makes a cell difficult terrain."""
    return is_cell_in_zone_with_effect(
        x, y, ZoneEffectType.DIFFICULT_TERRAIN, zones, config
    ) is not None


def apply_zone_terrain(
    cell_states: CellStateMap,
    zones: Sequence[PersistentZone],
    config: GridConfig
) -> Dict[Tuple[int, int], CellState]:
    """
    Combine the static cell map with difficult terrain zones.

    Free cells covered by an active difficult terrain zone become difficult;
    blocked cells stay blocked. The input map is not modified.
    """
    combined = dict(cell_states)
    covered: Set[Tuple[int, int]] = set()

    for zone in zones:
        if not zone.is_active or not zone.has_effect(ZoneEffectType.DIFFICULT_TERRAIN):
            continue
        covered.update((c.x, c.y) for c in get_zone_affected_cells(zone, config))

    for x, y in covered:
        if get_cell_state(x, y, cell_states) == CellState.FREE:
            combined[(x, y)] = CellState.DIFFICULT

    return combined


# ============================================================================
# ROUND TRACKING
# ============================================================================

def advance_zone_rounds(zones: Sequence[PersistentZone]) -> ZoneRoundResult:
    """
    Advance zone timers by one round.

    Timed zones count one more elapsed round and expire once it reaches
    their duration. Permanent zones pass through unchanged. Zones are
    copied, never modified in place.

    Returns:
        ZoneRoundResult(active_zones, expired_zones)
    """
    active_zones = []
    expired_zones = []

    for zone in zones:
        if zone.duration_rounds is None:
            active_zones.append(zone)
            continue

        current_round = (zone.current_round or 0) + 1
        updated = replace(zone, current_round=current_round)

        if current_round >= zone.duration_rounds:
            logger.debug(f"Zone {zone.name} ({zone.id}) expired after {current_round} rounds")
            expired_zones.append(updated)
        else:
            active_zones.append(updated)

    return ZoneRoundResult(active_zones=active_zones, expired_zones=expired_zones)


# ============================================================================
# ZONE BUILDERS
# ============================================================================

def create_zone(
    name: str,
    shape: AreaShape,
    origin_x: int,
    origin_y: int,
    size_feet: float,
    **overrides
) -> PersistentZone:
    """
    Create a zone with default display values and a fresh id.

    Args:
        name: Display name
        shape: Area shape
        origin_x, origin_y: Origin cell
        size_feet: Size of the area in feet
        **overrides: Any other PersistentZone field

    Returns:
        A new active zone
    """
    overrides.setdefault("id", f"zone_{uuid.uuid4().hex[:12]}")
    return PersistentZone(
        name=name,
        shape=AreaShape(shape),
        origin_x=origin_x,
        origin_y=origin_y,
        size_feet=size_feet,
        **overrides
    )


def create_difficult_terrain_zone(
    name: str,
    shape: AreaShape,
    origin_x: int,
    origin_y: int,
    size_feet: float,
    direction: Optional[float] = None,
    **overrides
) -> PersistentZone:
    """Zone that makes its area difficult terrain (e.g. Spike Growth)."""
    return create_zone(
        name, shape, origin_x, origin_y, size_feet,
        direction=direction,
        effects=[ZoneEffect(id="dt_1", type=ZoneEffectType.DIFFICULT_TERRAIN)],
        color=overrides.pop("color", "#8B4513"),
        opacity=overrides.pop("opacity", 0.25),
        **overrides
    )


def create_damage_zone(
    name: str,
    shape: AreaShape,
    origin_x: int,
    origin_y: int,
    size_feet: float,
    dice_expression: str,
    damage_type: DamageType,
    trigger: ZoneTrigger = ZoneTrigger.ON_ENTER,
    direction: Optional[float] = None,
    **overrides
) -> PersistentZone:
    """Zone that deals damage when triggered (e.g. Wall of Fire)."""
    damage_type = DamageType(damage_type)
    return create_zone(
        name, shape, origin_x, origin_y, size_feet,
        direction=direction,
        effects=[ZoneEffect(
            id="dmg_1",
            type=ZoneEffectType.DAMAGE,
            trigger=ZoneTrigger(trigger),
            damage=ZoneDamage(dice_expression=dice_expression, damage_type=damage_type)
        )],
        color=overrides.pop("color", DAMAGE_ZONE_COLORS.get(damage_type, DAMAGE_ZONE_DEFAULT_COLOR)),
        opacity=overrides.pop("opacity", 0.35),
        **overrides
    )


def create_save_zone(
    name: str,
    shape: AreaShape,
    origin_x: int,
    origin_y: int,
    size_feet: float,
    ability: SaveAbility,
    dc: int,
    trigger: ZoneTrigger,
    on_success: Optional[str] = None,
    on_failure: Optional[str] = None,
    direction: Optional[float] = None,
    **overrides
) -> PersistentZone:
    """Zone that forces a saving throw when triggered (e.g. Cloudkill)."""
    return create_zone(
        name, shape, origin_x, origin_y, size_feet,
        direction=direction,
        effects=[ZoneEffect(
            id="save_1",
            type=ZoneEffectType.SAVING_THROW,
            trigger=ZoneTrigger(trigger),
            save=ZoneSave(
                ability=SaveAbility(ability),
                dc=dc,
                on_success=on_success,
                on_failure=on_failure
            )
        )],
        color=overrides.pop("color", "#9900ff"),
        opacity=overrides.pop("opacity", 0.3),
        **overrides
    )
