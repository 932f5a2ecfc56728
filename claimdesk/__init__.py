"""ClaimDesk - agent review workflow for auto insurance claims."""

__version__ = "1.0.0"
