"""Interactive entity-relationship diagram editor."""
