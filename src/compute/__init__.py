"""Batch computation coordination.

This module fans expensive computations out over a worker pool and
funnels their artifacts into the store through a single writer.
"""
