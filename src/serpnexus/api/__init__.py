"""
DataForSEO API access for SerpNexus.
"""
from .client import DataForSeoClient
from .models import ResponseEnvelope, SUCCESS_STATUS

__all__ = ["DataForSeoClient", "ResponseEnvelope", "SUCCESS_STATUS"]
