"""
Transit feed ingestion helpers.

The package holds the GTFS+ table validation engine and the relational schema
model used by :mod:`schema_recon` to keep feed namespaces in line with the
expected GTFS table layout.
"""
