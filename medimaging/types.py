"""Common type definitions for the MedImaging backend.

This module provides type aliases for the loosely typed payloads exchanged
with the PACS.
"""

from typing import Any

# Orthanc REST payloads
type JSONDict = dict[str, Any]
type PacsIdList = list[str]
