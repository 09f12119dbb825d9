"""discovery-filter: relay write-policy plugin for discovery relay sync."""
__version__ = "0.1.0"
