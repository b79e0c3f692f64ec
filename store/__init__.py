"""
Key-value persistence for engine state that outlives any view.

KeyValueStore is the only interface callers see; backends are in-memory
and PostgreSQL (optionally via an embedded pgserver instance).
"""

from store.kv import KeyValueStore, InMemoryKeyValueStore, StoreError
