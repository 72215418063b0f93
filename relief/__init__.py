from .gradient import IslandGradient
from .island import IslandHeight
from .noise import GradientNoise2D, fbm2

__all__ = ["GradientNoise2D", "IslandGradient", "IslandHeight", "fbm2"]
