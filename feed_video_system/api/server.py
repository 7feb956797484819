"""
FastAPI Server for the Feed Video System.

Debug and control endpoints for the playback slot manager, the preload cache
and the cart lock timer. Feed tiles are simulated with in-memory handles so
the limiter can be exercised without a device.
"""

import contextlib
import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from ..core.config import Config
from ..core.events import EventSystem
from ..core.timezone_utils import TimezoneManager
from ..cart.lock_timer import LockExpiryTimer
from ..cart.models import LockedProduct, format_remaining_time
from ..playback.integration import PlaybackModule
from ..playback.infrastructure.handles import InMemoryVideoHandle
from .models import (
    EventResponse,
    LockListResponse,
    LockProductRequest,
    LockedProductResponse,
    PlaybackStatusResponse,
    PreloadBatchRequest,
    PreloadBatchResponse,
    PreloadCheckResponse,
    PreloadStatusResponse,
    RegisterVideoRequest,
    SetLoadedRequest,
    SuccessResponse,
    SystemStatusResponse,
    VideoActionResponse,
    VideoStatusResponse,
)


class APIServer:
    """FastAPI server for the Feed Video System"""

    def __init__(self, config: Config, event_system: EventSystem, playback_module: PlaybackModule, lock_timer: LockExpiryTimer):
        self.config = config
        self.event_system = event_system
        self.playback_module = playback_module
        self.lock_timer = lock_timer
        self.timezone_manager = TimezoneManager(config.system.timezone)
        self.logger = logging.getLogger(__name__)

        # Simulated tiles; the slot manager only holds weak references
        self._tiles: Dict[str, InMemoryVideoHandle] = {}

        self.app = FastAPI(title="Feed Video System API", description="API for inspecting and driving feed video playback", version="1.0.0", lifespan=self._lifespan)

        # Server state
        self.server_start_time = datetime.now()
        self.running = False
        self._server: Optional[uvicorn.Server] = None
        self._server_thread: Optional[threading.Thread] = None

        self.app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

        self._setup_routes()

    @contextlib.asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        self.lock_timer.start()
        try:
            yield
        finally:
            await self.lock_timer.stop()
            await self.playback_module.shutdown()
            self._tiles.clear()

    def _setup_routes(self):
        """Setup API routes"""
        slot_manager = self.playback_module.slot_manager
        preload_cache = self.playback_module.preload_cache
        preload_scheduler = self.playback_module.preload_scheduler

        @self.app.get("/", response_model=SuccessResponse)
        async def root():
            return SuccessResponse(message="Feed Video System API")

        @self.app.get("/health")
        async def health_check():
            return {"status": "healthy", "timestamp": datetime.now().isoformat()}

        @self.app.get("/system/status", response_model=SystemStatusResponse)
        async def get_system_status():
            """Get overall system status"""
            module_status = self.playback_module.get_module_status()
            uptime = (datetime.now() - self.server_start_time).total_seconds()
            return SystemStatusResponse(
                platform=module_status["platform"],
                playback=self._playback_status().model_dump(),
                preload=self._preload_status().model_dump(),
                locked_products=self.lock_timer.count,
                uptime_seconds=uptime,
            )

        @self.app.get("/events", response_model=List[EventResponse])
        async def get_events(limit: int = Query(default=20, ge=1, le=200), source: Optional[str] = Query(None, description="slot_manager, preload_cache or lock_timer")):
            """Recent playback, preload and cart events"""
            events = self.event_system.get_recent_events(limit=limit, source=source)
            return [EventResponse(event_type=e.event_type.value, source=e.source, data=e.data, timestamp=e.timestamp.isoformat()) for e in events]

        # Playback
        @self.app.get("/playback/status", response_model=PlaybackStatusResponse)
        async def get_playback_status():
            return self._playback_status()

        @self.app.post("/playback/videos/{video_id}", response_model=VideoStatusResponse)
        async def register_video(video_id: str, request: Optional[RegisterVideoRequest] = None):
            """Mount a simulated tile and register its handle"""
            request = request or RegisterVideoRequest()
            handle = InMemoryVideoHandle(name=video_id, fail_play=request.fail_play, fail_pause=request.fail_pause)
            self._tiles[video_id] = handle
            slot_manager.register(video_id, handle)
            return self._video_status(video_id)

        @self.app.get("/playback/videos/{video_id}", response_model=VideoStatusResponse)
        async def get_video(video_id: str):
            return self._video_status(video_id)

        @self.app.delete("/playback/videos/{video_id}", response_model=SuccessResponse)
        async def unregister_video(video_id: str):
            """Unmount a tile; stops it first if it is playing"""
            await slot_manager.unregister(video_id)
            self._tiles.pop(video_id, None)
            return SuccessResponse(message=f"Video {video_id} unregistered")

        @self.app.post("/playback/videos/{video_id}/start", response_model=VideoActionResponse)
        async def start_video(video_id: str):
            if not slot_manager.is_registered(video_id):
                raise HTTPException(status_code=404, detail=f"Video not registered: {video_id}")

            if not await slot_manager.start(video_id):
                raise HTTPException(status_code=409, detail=f"Video {video_id} could not be started")

            return VideoActionResponse(success=True, video_id=video_id, message="Video started", playing_ids=slot_manager.playing_ids)

        @self.app.post("/playback/videos/{video_id}/stop", response_model=VideoActionResponse)
        async def stop_video(video_id: str):
            if not slot_manager.is_registered(video_id):
                raise HTTPException(status_code=404, detail=f"Video not registered: {video_id}")

            was_playing = slot_manager.is_playing(video_id)
            await slot_manager.stop(video_id)
            message = "Video stopped" if was_playing else "Video was not playing"
            return VideoActionResponse(success=True, video_id=video_id, message=message, playing_ids=slot_manager.playing_ids)

        @self.app.post("/playback/videos/{video_id}/loaded", response_model=VideoStatusResponse)
        async def set_video_loaded(video_id: str, request: SetLoadedRequest):
            if not slot_manager.is_registered(video_id):
                raise HTTPException(status_code=404, detail=f"Video not registered: {video_id}")
            slot_manager.set_loaded(video_id, request.loaded)
            return self._video_status(video_id)

        @self.app.post("/playback/pause-all", response_model=SuccessResponse)
        async def pause_all_videos():
            """Pause everything, as when the app moves to the background"""
            stopped = await slot_manager.pause_all()
            return SuccessResponse(message=f"Paused {stopped} video(s)", data={"stopped": stopped})

        # Preload
        @self.app.get("/preload/status", response_model=PreloadStatusResponse)
        async def get_preload_status():
            return self._preload_status()

        @self.app.get("/preload/check", response_model=PreloadCheckResponse)
        async def check_preloaded(url: str = Query(..., min_length=1)):
            entry = preload_cache.get_entry(url)
            return PreloadCheckResponse(url=url, preloaded=entry is not None, warmed_at=entry.warmed_at.isoformat() if entry else None)

        @self.app.post("/preload/batch", response_model=PreloadBatchResponse)
        async def preload_batch(request: PreloadBatchRequest):
            """Warm the URLs closest to the visible index"""
            if request.background:
                preload_scheduler.schedule_batch(request.urls, request.priority_index)
                return PreloadBatchResponse(scheduled=True, processed=0, preloaded_urls=preload_cache.urls)

            processed = await preload_scheduler.preload_batch(request.urls, request.priority_index)
            return PreloadBatchResponse(scheduled=False, processed=processed, preloaded_urls=preload_cache.urls)

        @self.app.post("/preload/cancel", response_model=SuccessResponse)
        async def cancel_preload():
            cancelled = await preload_scheduler.cancel()
            return SuccessResponse(message="Preload batch cancelled" if cancelled else "No preload batch running", data={"cancelled": cancelled})

        @self.app.delete("/preload", response_model=SuccessResponse)
        async def evict_preloaded(url: Optional[str] = Query(None, description="URL to evict; omit to clear everything")):
            if url is None:
                cleared = preload_cache.clear()
                return SuccessResponse(message=f"Cleared {cleared} preload entries", data={"cleared": cleared})

            if not preload_cache.evict(url):
                raise HTTPException(status_code=404, detail=f"URL not preloaded: {url}")
            return SuccessResponse(message=f"Evicted {url}")

        # Cart locks
        @self.app.get("/cart/locks", response_model=LockListResponse)
        async def get_locks():
            locks = self.lock_timer.locks
            return LockListResponse(locks=[self._lock_response(item) for item in locks], count=len(locks), total=self.lock_timer.total)

        @self.app.post("/cart/locks", response_model=LockedProductResponse)
        async def lock_product(request: LockProductRequest):
            try:
                locked = self.lock_timer.lock(
                    product_id=request.product_id,
                    name=request.name,
                    price=request.price,
                    image=request.image,
                    category=request.category,
                    cashback=request.cashback,
                )
            except ValueError as e:
                raise HTTPException(status_code=422, detail=str(e))
            return self._lock_response(locked)

        @self.app.delete("/cart/locks/{lock_id}", response_model=SuccessResponse)
        async def unlock_product(lock_id: str):
            if not self.lock_timer.unlock(lock_id):
                raise HTTPException(status_code=404, detail=f"Lock not found: {lock_id}")
            return SuccessResponse(message=f"Unlocked {lock_id}")

    def _playback_status(self) -> PlaybackStatusResponse:
        status = self.playback_module.slot_manager.get_status()
        return PlaybackStatusResponse(
            total_videos=status.total_videos,
            currently_playing=status.currently_playing,
            max_simultaneous=status.max_simultaneous,
            free_slots=status.free_slots,
            playing_ids=status.playing_ids,
        )

    def _preload_status(self) -> PreloadStatusResponse:
        status = self.playback_module.preload_scheduler.get_status()
        return PreloadStatusResponse(
            preloaded_count=status.preloaded_count,
            max_preloaded=status.max_preloaded,
            is_preloading=status.is_preloading,
            preloaded_urls=status.preloaded_urls,
        )

    def _video_status(self, video_id: str) -> VideoStatusResponse:
        video = self.playback_module.slot_manager.get_video(video_id)
        if video is None:
            raise HTTPException(status_code=404, detail=f"Video not registered: {video_id}")

        return VideoStatusResponse(
            video_id=video.video_id,
            is_playing=video.is_playing,
            is_loaded=video.is_loaded,
            has_handle=video.handle is not None,
            registered_at=video.registered_at.isoformat(),
            started_at=video.started_at.isoformat() if video.started_at else None,
        )

    def _lock_response(self, item: LockedProduct) -> LockedProductResponse:
        return LockedProductResponse(
            id=item.id,
            product_id=item.product_id,
            name=item.name,
            price=item.price,
            image=item.image,
            cashback=item.cashback,
            category=item.category,
            locked_at=item.locked_at.isoformat(),
            expires_at=item.expires_at.isoformat(),
            expires_at_display=self.timezone_manager.format_timestamp(item.expires_at),
            remaining_seconds=item.remaining_seconds,
            remaining_display=format_remaining_time(item.remaining_seconds),
            status=item.status.value,
        )

    def start(self) -> bool:
        """Start the API server in a background thread"""
        if self.running:
            self.logger.warning("API server is already running")
            return True

        if not self.config.system.enable_api:
            self.logger.info("API server disabled in configuration")
            return False

        try:
            self.logger.info(f"Starting API server on {self.config.system.api_host}:{self.config.system.api_port}")
            server_config = uvicorn.Config(self.app, host=self.config.system.api_host, port=self.config.system.api_port, log_level="info")
            self._server = uvicorn.Server(server_config)
            self.running = True

            self._server_thread = threading.Thread(target=self._run_server, daemon=True)
            self._server_thread.start()
            return True

        except Exception as e:
            self.logger.error(f"Error starting API server: {e}")
            self.running = False
            return False

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the API server; the lifespan hook shuts playback down"""
        if not self.running:
            return

        self.logger.info("Stopping API server...")
        if self._server:
            self._server.should_exit = True
        if self._server_thread:
            self._server_thread.join(timeout=timeout)

        self.running = False
        self.logger.info("API server stopped")

    def _run_server(self) -> None:
        try:
            self._server.run()
        except Exception as e:
            self.logger.error(f"Error running API server: {e}")
        finally:
            self.running = False

    def is_running(self) -> bool:
        return self.running
