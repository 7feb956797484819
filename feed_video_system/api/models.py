"""
Data models for the Feed Video System API.

This module defines Pydantic models for API requests and responses.
"""

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, Field


class SuccessResponse(BaseModel):
    """Generic success response"""

    success: bool = True
    message: str
    data: Optional[Dict[str, Any]] = None


class SystemStatusResponse(BaseModel):
    """System status response model"""

    platform: str
    playback: Dict[str, Any]
    preload: Dict[str, Any]
    locked_products: int
    uptime_seconds: Optional[float] = None


class PlaybackStatusResponse(BaseModel):
    """Slot manager status"""

    total_videos: int
    currently_playing: int
    max_simultaneous: int
    free_slots: int
    playing_ids: List[str]


class RegisterVideoRequest(BaseModel):
    """Register a simulated feed tile"""

    fail_play: bool = Field(False, description="Simulate a player that rejects play commands")
    fail_pause: bool = Field(False, description="Simulate a player that rejects pause commands")


class VideoStatusResponse(BaseModel):
    """Single video status"""

    video_id: str
    is_playing: bool
    is_loaded: bool
    has_handle: bool
    registered_at: str
    started_at: Optional[str] = None


class VideoActionResponse(BaseModel):
    """Result of a start/stop request"""

    success: bool
    video_id: str
    message: str
    playing_ids: List[str]


class SetLoadedRequest(BaseModel):
    loaded: bool = True


class PreloadStatusResponse(BaseModel):
    """Preload cache status"""

    preloaded_count: int
    max_preloaded: int
    is_preloading: bool
    preloaded_urls: List[str]


class PreloadBatchRequest(BaseModel):
    """Batch preload request"""

    urls: List[str] = Field(..., description="Feed video URLs in feed order")
    priority_index: int = Field(0, description="Index of the currently visible item")
    background: bool = Field(False, description="Schedule the batch and return immediately")


class PreloadBatchResponse(BaseModel):
    scheduled: bool
    processed: int
    preloaded_urls: List[str]


class PreloadCheckResponse(BaseModel):
    url: str
    preloaded: bool
    warmed_at: Optional[str] = None


class LockProductRequest(BaseModel):
    """Lock a product in the cart"""

    product_id: str = Field(..., min_length=1)
    name: str
    price: float = Field(..., ge=0)
    image: str = ""
    category: str = Field("products", pattern="^(products|service)$")
    cashback: Optional[str] = None


class LockedProductResponse(BaseModel):
    id: str
    product_id: str
    name: str
    price: float
    image: str
    cashback: str
    category: str
    locked_at: str
    expires_at: str
    expires_at_display: str
    remaining_seconds: float
    remaining_display: str
    status: str


class LockListResponse(BaseModel):
    locks: List[LockedProductResponse]
    count: int
    total: float


class EventResponse(BaseModel):
    event_type: str
    source: str
    data: Dict[str, Any]
    timestamp: str
