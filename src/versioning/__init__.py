"""Version classification and source resolution."""
