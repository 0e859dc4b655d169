"""Player directory, question catalog and built-in question packs."""
