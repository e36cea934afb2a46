"""Cross-cutting primitives: errors, ids, configuration."""
