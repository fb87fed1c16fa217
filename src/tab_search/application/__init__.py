"""
Application layer: health tracking and multi-source search orchestration.
"""
