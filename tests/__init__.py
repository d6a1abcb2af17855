"""Test package for the Sum Drill.

Core tests drive the generator and session logic with seeded or scripted
random sources and a fake clock. UI tests run headlessly using pygame's dummy
video driver to avoid opening real windows. Run ``pytest`` from the project
root.
"""
