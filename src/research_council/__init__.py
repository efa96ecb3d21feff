"""Multi-agent research council: phased agent turns, memory ledger, entity graph."""

__version__ = "0.1.0"
