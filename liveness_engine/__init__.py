"""
Frame-by-frame face liveness decision engine
"""
__version__ = "0.1.0"
