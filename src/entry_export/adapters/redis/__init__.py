"""Redis adapter – export state store and cross-process step guard."""
from entry_export.adapters.redis.lock import RedisStepGuard
from entry_export.adapters.redis.state_store import RedisStateStore

__all__ = ["RedisStateStore", "RedisStepGuard"]
