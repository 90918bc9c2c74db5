"""
Tests for ServerConfigService
"""
import pytest

from bot.services.server_config import ServerConfigService


@pytest.mark.asyncio
async def test_register_server_is_idempotent(database):
    service = ServerConfigService(database.session_factory)

    assert await service.register_server(1) is True
    assert await service.register_server(1) is False
    assert await service.get_all_server_ids() == [1]


@pytest.mark.asyncio
async def test_registered_server_has_no_channel(database):
    service = ServerConfigService(database.session_factory)
    await service.register_server(1)

    assert await service.get_announcement_channel(1) is None
    assert await service.get_announcement_channel(999) is None


@pytest.mark.asyncio
async def test_set_announcement_channel_upserts(database):
    service = ServerConfigService(database.session_factory)

    await service.set_announcement_channel(5, 500)
    assert await service.get_announcement_channel(5) == 500
    assert await service.get_all_server_ids() == [5]

    await service.set_announcement_channel(5, 501)
    assert await service.get_announcement_channel(5) == 501
    assert await service.get_all_server_ids() == [5]


@pytest.mark.asyncio
async def test_registration_keeps_existing_channel(database):
    service = ServerConfigService(database.session_factory)
    await service.set_announcement_channel(5, 500)

    await service.register_server(5)

    assert await service.get_announcement_channel(5) == 500
