from pydantic import BaseModel, Field, ConfigDict
from typing import Generic, List, Optional, TypeVar

DataType = TypeVar("DataType")


class APIResponse(BaseModel, Generic[DataType]):
    """Standard API response wrapper"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    message: str = Field(default="Success", description="Response message")
    data: Optional[DataType] = Field(default=None, description="Response data")
    success: bool = Field(default=True, description="Success status")

    @staticmethod
    def ok(message: str = "Success", data: Optional[DataType] = None) -> "APIResponse[DataType]":
        """Create a success response"""
        return APIResponse(message=message, data=data, success=True)


class APIListResponse(BaseModel, Generic[DataType]):
    """List wrapper carrying the item count alongside the data"""

    message: str = Field(default="Success")
    count: int = Field(..., ge=0)
    data: List[DataType] = Field(default_factory=list)
    success: bool = Field(default=True)
