"""
Infrastructure layer: result cache and source adapter plumbing.
"""
