"""Aragon Package Manager access."""

from .client import ARTIFACT_FILE, ApmClient
from .content import ContentClient, ContentLocation, decode_content_uri
from .models import LATEST, AragonRepo, Role, default_apm_name, format_version, parse_version

__all__ = [
    "ARTIFACT_FILE",
    "ApmClient",
    "AragonRepo",
    "ContentClient",
    "ContentLocation",
    "LATEST",
    "Role",
    "decode_content_uri",
    "default_apm_name",
    "format_version",
    "parse_version",
]
