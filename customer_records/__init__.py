"""Customer Records — customer registry API with claims-based authorization."""

__version__ = "1.0.0"
