import asyncio

import pytest

from feed_video_system.core.device import DevicePlatform
from feed_video_system.playback import PlaybackModule
from feed_video_system.playback.infrastructure.handles import InMemoryVideoHandle


@pytest.mark.parametrize(
    "device_platform, max_simultaneous, max_preloaded",
    [
        (DevicePlatform.IOS, 2, 3),
        (DevicePlatform.ANDROID, 4, 5),
        (DevicePlatform.WEB, 4, 5),
        (DevicePlatform.OTHER, 4, 5),
    ],
)
def test_capacities_follow_platform(config, device_platform, max_simultaneous, max_preloaded):
    module = PlaybackModule(config, device_platform=device_platform)

    assert module.slot_manager.max_simultaneous == max_simultaneous
    assert module.preload_cache.max_preloaded == max_preloaded
    assert module.preload_scheduler.inter_task_delay_seconds == 0


def test_configured_platform_is_used(config):
    config.playback.platform = "ios"

    module = PlaybackModule(config)

    assert module.device_platform is DevicePlatform.IOS
    assert module.slot_manager.max_simultaneous == 2


def test_ios_third_video_evicts_first(config, event_system):
    module = PlaybackModule(config, event_system=event_system, device_platform=DevicePlatform.IOS)
    handles = {name: InMemoryVideoHandle(name=name) for name in ("a", "b", "c")}
    for name, handle in handles.items():
        module.slot_manager.register(name, handle)

    async def scenario():
        for name in ("a", "b", "c"):
            await module.slot_manager.start(name)

    asyncio.run(scenario())

    assert module.slot_manager.playing_ids == ["b", "c"]
    assert not handles["a"].is_playing


def test_shutdown_clears_everything(config):
    module = PlaybackModule(config, device_platform=DevicePlatform.ANDROID)
    handle = InMemoryVideoHandle(name="a")
    module.slot_manager.register("a", handle)

    async def scenario():
        await module.slot_manager.start("a")
        await module.preload_scheduler.preload_batch(["u1", "u2"])
        await module.shutdown()

    asyncio.run(scenario())

    status = module.get_module_status()
    assert status["platform"] == "android"
    assert status["currently_playing"] == 0
    assert status["total_videos"] == 0
    assert status["preloaded_count"] == 0
    assert status["errors"]["error_count"] == 0
    assert not handle.is_playing
