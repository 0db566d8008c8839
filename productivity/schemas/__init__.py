# Productivity Schemas
from productivity.schemas.common import ApiModel, ApiResponse, ErrorResponse, Page

__all__ = ["ApiModel", "ApiResponse", "ErrorResponse", "Page"]
