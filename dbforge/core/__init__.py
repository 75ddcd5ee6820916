"""dbforge core — hashing, staging, catalog, orchestration."""
