"""photoSweep: keep-or-remove triage for large photo collections."""

__version__ = "0.1.0"
