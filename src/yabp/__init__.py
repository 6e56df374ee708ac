"""yabp - agent prompt scaffolding for new projects."""

__version__ = "0.1.0"
