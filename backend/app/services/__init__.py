from app.services.service_client import BuilderServiceClient, ServiceResponse, ServiceErrorInfo
from app.services.layout_service_client import LayoutServiceClient
from app.services.elementor_client import ElementorClient
from app.services.textlabs_client import TextLabsClient

__all__ = [
    # Builder service clients
    "BuilderServiceClient",
    "ServiceResponse",
    "ServiceErrorInfo",
    "LayoutServiceClient",
    "ElementorClient",
    "TextLabsClient",
]
