"""Test package for the ear trainer.

Core tests drive the scheduler, the test flow and the input adapter with a
fake clock and a recording audio backend, so they need neither a sound card
nor a window. The smoke test runs the pygame shell with SDL's dummy drivers.
Run ``pytest`` from the project root.
"""
