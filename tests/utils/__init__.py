"""
Test utilities and helpers for MedImaging tests.
"""

from .fake_pacs import DIRECT_URL, PROXY_URL, FakePacs

__all__ = ["DIRECT_URL", "PROXY_URL", "FakePacs"]
