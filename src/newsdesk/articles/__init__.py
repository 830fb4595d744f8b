"""Article lifecycle: collection, deduplicated storage, search, backup and restore."""
