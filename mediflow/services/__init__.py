"""
Application services.
"""
from .handover import HandoverService, SummarizationGateway

__all__ = ["HandoverService", "SummarizationGateway"]
