"""qsearch: search a quake catalog and fetch linked event documents."""

__version__ = "0.1.0"
