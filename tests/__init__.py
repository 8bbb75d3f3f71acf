"""Test package for Jellyfish Sums.

Core tests drive the round engine with a fake clock and fixed seeds so they
run without pygame.  The smoke tests run the pygame UI headlessly using SDL's
dummy drivers.  Run ``pytest`` from the project root.
"""
