from unittest.mock import AsyncMock, MagicMock

import pytest

from controllers.voice_controller import VoiceController, voice_state_to_event, guild_snapshot
from models.events import EnteredEvent, LeftEvent, SnapshotEvent, VoiceEntry
from services.session_tracker import SessionTracker


def make_member(member_id=123, guild_id=1, bot=False):
    member = MagicMock()
    member.id = member_id
    member.bot = bot
    member.guild.id = guild_id
    return member


def voice_state(channel_id=None):
    state = MagicMock()
    if channel_id is None:
        state.channel = None
    else:
        state.channel.id = channel_id
    return state


def test_join_is_entered_event():
    event = voice_state_to_event(make_member(), voice_state(None), voice_state(10))
    assert event == EnteredEvent(user_id="123", guild_id="1", channel_id="10")


def test_move_is_entered_event():
    event = voice_state_to_event(make_member(), voice_state(10), voice_state(11))
    assert event == EnteredEvent(user_id="123", guild_id="1", channel_id="11")


def test_disconnect_is_left_event():
    event = voice_state_to_event(make_member(), voice_state(10), voice_state(None))
    assert event == LeftEvent(user_id="123", guild_id="1")


def test_same_channel_update_is_ignored():
    assert voice_state_to_event(make_member(), voice_state(10), voice_state(10)) is None
    assert voice_state_to_event(make_member(), voice_state(None), voice_state(None)) is None


def test_bots_are_ignored():
    assert voice_state_to_event(make_member(bot=True), voice_state(None), voice_state(10)) is None


def test_guild_snapshot():
    guild = MagicMock()
    guild.id = 1
    voice = MagicMock()
    voice.voice_states = {123: voice_state(10), 456: voice_state(10)}
    stage = MagicMock()
    stage.voice_states = {789: voice_state(20)}
    guild.voice_channels = [voice]
    guild.stage_channels = [stage]
    bot_member = make_member(member_id=456, bot=True)
    guild.get_member.side_effect = lambda member_id: bot_member if member_id == 456 else None

    snapshot = guild_snapshot(guild)

    assert snapshot == SnapshotEvent(guild_id="1", entries=[
        VoiceEntry(user_id="123", channel_id="10"),
        VoiceEntry(user_id="789", channel_id="20"),
    ])


def test_listeners_registered():
    bot = MagicMock()
    controller = VoiceController(bot, MagicMock(spec=SessionTracker))

    registered = [call.args[0] for call in bot.add_listener.call_args_list]
    assert registered == [
        controller.on_voice_state_update,
        controller.on_guild_available,
        controller.on_guild_join,
    ]


@pytest.mark.asyncio
async def test_voice_state_update_forwards_event():
    tracker = MagicMock(spec=SessionTracker)
    tracker.handle_event = AsyncMock()
    controller = VoiceController(MagicMock(), tracker)

    await controller.on_voice_state_update(make_member(), voice_state(10), voice_state(None))
    await controller.on_voice_state_update(make_member(), voice_state(10), voice_state(10))

    tracker.handle_event.assert_called_once_with(LeftEvent(user_id="123", guild_id="1"))


@pytest.mark.asyncio
async def test_guild_available_sends_snapshot():
    tracker = MagicMock(spec=SessionTracker)
    tracker.handle_event = AsyncMock()
    controller = VoiceController(MagicMock(), tracker)
    guild = MagicMock()
    guild.id = 1
    guild.voice_channels = []
    guild.stage_channels = []

    await controller.on_guild_available(guild)

    tracker.handle_event.assert_called_once_with(SnapshotEvent(guild_id="1", entries=[]))
