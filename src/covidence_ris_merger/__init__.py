"""covidence_ris_merger: inject Covidence tags into RIS exports as keyword lines."""

__version__ = "0.1.0"
