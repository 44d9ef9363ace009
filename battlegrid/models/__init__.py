# Session Snapshot Models

from .snapshot import (
    GridConfigSchema,
    ZoneDamageSchema,
    ZoneSaveSchema,
    ZoneEffectSchema,
    PersistentZoneSchema,
    GridSnapshot,
)
