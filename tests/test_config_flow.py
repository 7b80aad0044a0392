"""Tests for the Bloom config and options flows."""

# pylint: disable=redefined-outer-name,unused-argument

from unittest.mock import patch

from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.bloom import const


async def test_user_step_creates_entry(hass: HomeAssistant) -> None:
    """A name creates the entry with a fresh friend code."""
    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == const.CONFIG_FLOW_STEP_USER

    with patch("custom_components.bloom.async_setup_entry", return_value=True):
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"],
            {const.CONF_USER_NAME: "  Ada ", const.CONF_API_KEY: "secret"},
        )
        await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert result.get("title") == "Ada"
    data = result["data"]
    assert data[const.CONF_USER_NAME] == "Ada"
    assert len(data[const.CONF_FRIEND_CODE]) == const.FRIEND_CODE_LENGTH
    assert result["options"] == {const.CONF_API_KEY: "secret"}


async def test_user_step_without_key(hass: HomeAssistant) -> None:
    """The API key is optional."""
    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    with patch("custom_components.bloom.async_setup_entry", return_value=True):
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], {const.CONF_USER_NAME: "Ada"}
        )
        await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert result["options"] == {}


async def test_user_step_blank_name(hass: HomeAssistant) -> None:
    """A blank name shows the form again with an error."""
    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    result = await hass.config_entries.flow.async_configure(
        result["flow_id"], {const.CONF_USER_NAME: "   "}
    )

    assert result.get("type") == FlowResultType.FORM
    assert result.get("errors") == {
        const.CONF_USER_NAME: const.TRANS_KEY_ERROR_INVALID_NAME
    }


async def test_single_instance(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Only one entry may exist."""
    mock_config_entry.add_to_hass(hass)

    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.ABORT
    assert result.get("reason") == const.TRANS_KEY_ERROR_SINGLE_INSTANCE


async def test_options_flow_sets_and_clears_key(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """The options flow edits the API key."""
    result = await hass.config_entries.options.async_init(init_integration.entry_id)
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == const.OPTIONS_FLOW_STEP_INIT

    result = await hass.config_entries.options.async_configure(
        result["flow_id"], {const.CONF_API_KEY: " secret "}
    )
    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert init_integration.options == {const.CONF_API_KEY: "secret"}

    result = await hass.config_entries.options.async_init(init_integration.entry_id)
    result = await hass.config_entries.options.async_configure(
        result["flow_id"], {const.CONF_API_KEY: ""}
    )
    assert init_integration.options == {}
