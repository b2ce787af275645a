"""dynprops - typed dynamic properties for relational entities."""

__version__ = "0.1.0"
