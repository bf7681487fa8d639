"""Registry — the in-memory, reloadable subject → document store.

The registry provides:
- Loading: scan a directory of JSON files into a complete mapping
- Publishing: swap whole snapshots in atomically on reload
- Lookup: point reads, property reads and batch queries with projection
"""
