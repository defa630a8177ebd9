"""Version range matching."""
