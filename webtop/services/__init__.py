"""Service layer: window state, layouts, launcher and backend panels."""
