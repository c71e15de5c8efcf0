"""Knowledge base service: hierarchical, versioned topics behind a role/ownership permission engine."""

__version__ = "1.0.0"
