"""relpack: release packaging for a pre-built cargo binary."""

__version__ = "0.1.0"
