"""Repository root discovery."""
