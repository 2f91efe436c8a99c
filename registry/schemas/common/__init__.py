# Local application imports
from registry.schemas.common.response_schemas import BaseResponse, ErrorDetails

__all__ = ["BaseResponse", "ErrorDetails"]
