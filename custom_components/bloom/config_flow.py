# File: config_flow.py
"""Config flow for the Bloom integration.

A single step: the user's name (required) and an optional Gemini API key. The
name and a freshly generated friend code are stored in the entry data and are
applied to storage by the coordinator at first refresh. The options flow edits
the API key.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers import selector

from . import const, data_builders as db


def build_user_schema(default_name: str = "") -> vol.Schema:
    """Build the schema for the user step."""
    return vol.Schema(
        {
            vol.Required(const.CONF_USER_NAME, default=default_name): str,
            vol.Optional(const.CONF_API_KEY): selector.TextSelector(
                selector.TextSelectorConfig(type=selector.TextSelectorType.PASSWORD)
            ),
        }
    )


def build_options_schema(current_api_key: str = "") -> vol.Schema:
    """Build the schema for the options step."""
    return vol.Schema(
        {
            vol.Optional(
                const.CONF_API_KEY,
                description={"suggested_value": current_api_key},
            ): selector.TextSelector(
                selector.TextSelectorConfig(type=selector.TextSelectorType.PASSWORD)
            ),
        }
    )


class BloomConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Bloom."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Ask for the user's name and an optional API key."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        errors: dict[str, str] = {}
        if user_input is not None:
            name = str(user_input.get(const.CONF_USER_NAME, "")).strip()
            if not name:
                errors[const.CONF_USER_NAME] = const.TRANS_KEY_ERROR_INVALID_NAME
            else:
                api_key = str(user_input.get(const.CONF_API_KEY) or "").strip()
                const.LOGGER.info("INFO: Creating Bloom entry for %s", name)
                return self.async_create_entry(
                    title=name,
                    data={
                        const.CONF_USER_NAME: name,
                        const.CONF_FRIEND_CODE: db.generate_friend_code(),
                    },
                    options={const.CONF_API_KEY: api_key} if api_key else {},
                )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=build_user_schema(
                (user_input or {}).get(const.CONF_USER_NAME, "")
            ),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return BloomOptionsFlowHandler()


class BloomOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for the estimation service API key."""

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Edit the API key (blank clears it)."""
        if user_input is not None:
            api_key = str(user_input.get(const.CONF_API_KEY) or "").strip()
            const.LOGGER.debug(
                "DEBUG: Updating Bloom options (api key set: %s)", bool(api_key)
            )
            return self.async_create_entry(
                title="",
                data={const.CONF_API_KEY: api_key} if api_key else {},
            )

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=build_options_schema(
                self.config_entry.options.get(const.CONF_API_KEY, "")
            ),
        )
