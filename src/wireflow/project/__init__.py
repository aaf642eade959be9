"""Project layout, configuration cascade and loaded project state."""
