"""Orthanc PACS integration: REST client and payload converters."""

from medimaging.services.pacs.client import PacsClient

__all__ = ["PacsClient"]
