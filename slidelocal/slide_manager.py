"""Slide accessories and their polling."""

import asyncio
import logging
from typing import Any, Dict, Optional
from uuid import UUID

import httpx

from .config import get_settings
from .models import PositionState, SlideConfig, SlideStatus
from .position import percent_to_slide_pos, slide_pos_to_percent
from .rpc import SlideClient, SlideError

logger = logging.getLogger(__name__)


def _has_position(info: Any) -> bool:
    return (
        isinstance(info, dict)
        and isinstance(info.get("pos"), (int, float))
        and not isinstance(info.get("pos"), bool)
    )


class SlideAccessory:
    """One Slide exposed as a window covering."""

    def __init__(
        self,
        config: SlideConfig,
        default_poll_interval: int,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.config = config
        self.name = config.name
        self.host = config.host
        self.poll_interval = (
            config.poll_interval if config.poll_interval is not None else default_poll_interval
        )
        self.refresh_delay = settings.refresh_delay

        self.client = SlideClient(
            self.host,
            timeout=config.timeout or settings.default_timeout,
            username=config.client_username(settings.default_slide_username),
            password=config.code or None,
            transport=transport,
        )

        self.current_position: Optional[int] = None
        self.target_position: Optional[int] = None
        self.position_state = PositionState.STOPPED

        self._poll_task: Optional[asyncio.Task] = None
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def slide_id(self) -> UUID:
        return self.config.slide_id

    def status(self) -> SlideStatus:
        return SlideStatus(
            id=self.slide_id,
            name=self.name,
            slug=self.config.slug,
            host=self.host,
            auth_enabled=self.client.auth_enabled,
            current_position=self.current_position,
            target_position=self.target_position,
            position_state=self.position_state,
        )

    async def update_from_device(self) -> None:
        """Refresh cached position from the device; failures are only logged."""
        try:
            info = await self.client.get_info()
        except SlideError as e:
            logger.debug(f"Failed to update Slide info for {self.name}: {e}")
            return

        if not _has_position(info):
            return

        percent = slide_pos_to_percent(info["pos"])
        self.current_position = percent
        self.target_position = percent
        self.position_state = PositionState.STOPPED

    async def get_current_position(self) -> int:
        """Read the live position in percent open, 0 when unavailable."""
        try:
            info = await self.client.get_info()
            if not _has_position(info):
                raise SlideError("No pos in response")
        except SlideError as e:
            logger.warning(f"Error getting current position for {self.name}: {e}")
            return 0

        percent = slide_pos_to_percent(info["pos"])
        logger.debug(f"CurrentPosition({self.name}) = {percent}%")
        return percent

    async def set_target_position(self, percent: int) -> Any:
        """Move to ``percent`` open and schedule a refresh."""
        slide_pos = percent_to_slide_pos(percent)
        logger.info(
            f"Setting target position for {self.name} to {percent}% (slide pos={slide_pos:.2f})"
        )

        current = await self.get_current_position()
        if percent > current:
            state = PositionState.INCREASING
        elif percent < current:
            state = PositionState.DECREASING
        else:
            state = PositionState.STOPPED

        self.position_state = state

        try:
            result = await self.client.set_position(slide_pos)
        except SlideError as e:
            logger.warning(f"Error setting target position for {self.name}: {e}")
            self.position_state = PositionState.STOPPED
            raise

        self.target_position = percent
        self._schedule_refresh()
        return result

    async def stop(self) -> Any:
        result = await self.client.stop()
        self._schedule_refresh()
        return result

    async def calibrate(self) -> Any:
        return await self.client.calibrate()

    def _schedule_refresh(self) -> None:
        if self._refresh_task and not self._refresh_task.done():
            self._refresh_task.cancel()
        self._refresh_task = asyncio.create_task(self._delayed_refresh())

    async def _delayed_refresh(self) -> None:
        await asyncio.sleep(self.refresh_delay)
        await self.update_from_device()

    async def _poll_loop(self) -> None:
        interval = self.poll_interval / 1000
        while True:
            await asyncio.sleep(interval)
            try:
                await self.update_from_device()
            except Exception as e:
                logger.debug(f"Poll error for {self.name}: {e}")

    def start_polling(self) -> None:
        """Start background polling unless disabled or already running."""
        if not self.poll_interval or self.poll_interval <= 0:
            return
        if self._poll_task and not self._poll_task.done():
            return
        self._poll_task = asyncio.create_task(self._poll_loop())

    async def stop_polling(self) -> None:
        """Cancel polling and any pending refresh."""
        tasks = [t for t in (self._poll_task, self._refresh_task) if t and not t.done()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._poll_task = None
        self._refresh_task = None


class SlideManager:
    """Owns the set of slide accessories, keyed by slide id."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._accessories: Dict[UUID, SlideAccessory] = {}
        self._lock = asyncio.Lock()
        self._transport = transport
        self._started = False

    async def add_or_update(
        self,
        config: SlideConfig,
        default_poll_interval: Optional[int] = None,
    ) -> SlideAccessory:
        """Insert a slide, or replace the accessory registered for its id."""
        if default_poll_interval is None:
            default_poll_interval = get_settings().default_poll_interval

        accessory = SlideAccessory(config, default_poll_interval, transport=self._transport)

        async with self._lock:
            existing = self._accessories.get(accessory.slide_id)
            if existing:
                logger.info(f"Updating existing Slide accessory: {config.name} ({config.host})")
                await existing.stop_polling()
            else:
                logger.info(f"Registering new Slide accessory: {config.name} ({config.host})")
            for other in self._accessories.values():
                if other.slide_id != accessory.slide_id and other.config.slug == config.slug:
                    logger.warning(
                        f"Slug '{config.slug}' already used by {other.name} ({other.host}); "
                        f"{config.name} ({config.host}) is only reachable by id {accessory.slide_id}"
                    )
            self._accessories[accessory.slide_id] = accessory
            if self._started:
                accessory.start_polling()

        return accessory

    def get(self, id_or_slug: str) -> Optional[SlideAccessory]:
        """Get accessory by UUID or slug."""
        try:
            accessory = self._accessories.get(UUID(id_or_slug))
            if accessory:
                return accessory
        except ValueError:
            pass  # Not a UUID, try slug

        for accessory in self._accessories.values():
            if accessory.config.slug == id_or_slug:
                return accessory
        return None

    def list_accessories(self) -> list[SlideAccessory]:
        return list(self._accessories.values())

    def __len__(self) -> int:
        return len(self._accessories)

    def start(self) -> None:
        """Start polling for every registered slide."""
        self._started = True
        for accessory in self._accessories.values():
            accessory.start_polling()

    async def shutdown(self) -> None:
        """Stop polling and forget all accessories."""
        async with self._lock:
            self._started = False
            for accessory in self._accessories.values():
                await accessory.stop_polling()
            self._accessories.clear()


# Global slide manager instance
_slide_manager: Optional[SlideManager] = None


def get_slide_manager() -> SlideManager:
    """Get slide manager instance."""
    global _slide_manager
    if _slide_manager is None:
        _slide_manager = SlideManager()
    return _slide_manager
