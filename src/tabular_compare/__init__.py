"""tabular-compare - Compare tabular model schemas and curate update actions."""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
