"""Route blueprints, one module per page area."""
