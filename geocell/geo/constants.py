"""Numeric constants shared by the spherical primitives."""

import math

# Finest subdivision level; leaf cells live here.
MAX_LEVEL = 30

# Mean Earth radius used for metre/angle conversions.
EARTH_RADIUS_M = 6_371_010.0

M_PI = math.pi
M_PI_2 = math.pi / 2
M_PI_4 = math.pi / 4
M_1_PI = 1 / math.pi
M_SQRT2 = math.sqrt(2)
