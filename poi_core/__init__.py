"""
poi-consensus: stake-weighted consensus and trust scoring for subnet epochs.
"""

__version__ = "0.1.0"
