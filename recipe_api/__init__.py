"""Recipe import backend: URL canonicalization, dedup and extraction proxy."""
