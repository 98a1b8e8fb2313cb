"""
Storage subsystem.

Components:
- json_store.py: SQLite-backed keyed JSON collections with per-key versions
- keys.py: namespaced collection names
- notifier.py: publish/subscribe of collection changes + cross-process watcher
"""
