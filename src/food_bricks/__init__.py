"""Food Bricks - track food introductions and allergy risk for babies."""

__version__ = "0.1.0"
