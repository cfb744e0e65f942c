"""Core data model, impact classification and tree building."""
