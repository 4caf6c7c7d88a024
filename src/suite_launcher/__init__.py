"""Configuration-driven launcher for external test runners."""
