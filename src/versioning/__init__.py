"""Version models, normalization and tag matching."""
