"""HTTP blueprints. Each module exposes one ``Blueprint``."""
