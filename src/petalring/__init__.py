"""
Petal Ring
==========
Orbiting probe and comet-trail animation over a ring of petal segments.

A probe circles above the ring, ray-tests straight down to find the petal it
is over, and the petals around it light up and swell with a trail that fades
with ring distance.
"""

__version__ = "0.1.0"
__author__ = "Petal Ring Development Team"
