"""
Format definitions sub-package for bank-statement-ingest.

Contains YAML files that define the detection markers and tag vocabulary
of each supported statement format. The loader module (format_registry.py
in the parent package) reads these files once per process.
"""
