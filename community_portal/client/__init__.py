from .api import ApiResponse, PortalClient
from .donation_flow import DonationFlow, FlowError, FlowState, Notice, resolve_amount

__all__ = [
    "ApiResponse",
    "PortalClient",
    "DonationFlow",
    "FlowError",
    "FlowState",
    "Notice",
    "resolve_amount",
]
