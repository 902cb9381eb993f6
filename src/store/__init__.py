"""Parameter-indexed artifact storage layer.

This module persists computed artifacts with the parameters that produced
them in a single HDF5 container, consolidating repeated runs by identity.
"""
