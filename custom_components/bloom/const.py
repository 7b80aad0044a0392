# File: const.py
"""Constants for the Bloom integration.

This file centralizes storage keys, defaults, plant progression tables, event
names, service names and user-facing messages for consistency across the
integration.
"""

import logging

import homeassistant.util.dt as dt_util
from homeassistant.const import Platform

from .utils import dt_utils


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    global DEFAULT_TIME_ZONE
    DEFAULT_TIME_ZONE = dt_util.get_time_zone(hass.config.time_zone)
    if DEFAULT_TIME_ZONE is not None:
        dt_utils.set_default_timezone(DEFAULT_TIME_ZONE)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
BLOOM_TITLE = "Bloom"

# Integration Domain
DOMAIN = "bloom"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms
PLATFORMS = [
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORAGE_MANAGER = "storage_manager"
STORAGE_KEY = "bloom_app_data"
STORAGE_VERSION = 1
SCHEMA_VERSION_CURRENT = 1

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_USER_NAME = "user_name"
CONF_FRIEND_CODE = "friend_code"
CONF_API_KEY = "api_key"

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Data Keys (storage)
# ------------------------------------------------------------------------------------------------
DATA_SCHEMA_VERSION = "schema_version"
DATA_NAME = "name"
DATA_FRIEND_CODE = "friend_code"
DATA_ONBOARDING_COMPLETE = "onboarding_complete"
DATA_THEME = "theme"
DATA_LAST_ACTIVE_TAB = "last_active_tab"
DATA_PLANT = "plant"
DATA_HABITS = "habits"
DATA_FOOD_LOGS = "food_logs"
DATA_FRIENDS = "friends"
DATA_GROUPS = "groups"

# Plant
DATA_PLANT_STAGE = "stage"
DATA_PLANT_HEALTH = "health"
DATA_PLANT_EXPERIENCE = "experience"
DATA_PLANT_LEVEL = "level"
DATA_PLANT_LAST_INTERACTION_DATE = "last_interaction_date"

# Habit
DATA_HABIT_ID = "id"
DATA_HABIT_TITLE = "title"
DATA_HABIT_KIND = "kind"
DATA_HABIT_TARGET = "target"
DATA_HABIT_MAX_TARGET = "max_target"
DATA_HABIT_UNIT = "unit"
DATA_HABIT_COMPLETED_DATES = "completed_dates"
DATA_HABIT_STREAK = "streak"
DATA_HABIT_PROGRESS = "progress"

# Food log
DATA_FOOD_LOG_ID = "id"
DATA_FOOD_LOG_NAME = "name"
DATA_FOOD_LOG_CALORIES = "calories"
DATA_FOOD_LOG_DATE = "date"
DATA_FOOD_LOG_CREATED_AT = "created_at"

# Group
DATA_GROUP_ID = "id"
DATA_GROUP_NAME = "name"
DATA_GROUP_CODE = "code"
DATA_GROUP_MEMBERS = "members"
DATA_GROUP_SHARED_PLANT = "shared_plant"

# ------------------------------------------------------------------------------------------------
# Habit Kinds and Status
# ------------------------------------------------------------------------------------------------
HABIT_KIND_BOOLEAN = "boolean"
HABIT_KIND_NUMERIC = "numeric"
HABIT_KINDS = [HABIT_KIND_BOOLEAN, HABIT_KIND_NUMERIC]

HABIT_STATUS_NOT_MET = "not_met"
HABIT_STATUS_MET = "met"
HABIT_STATUS_OVER_LIMIT = "over_limit"

# Calorie habit matching
CALORIE_HABIT_UNIT = "kcal"
CALORIE_HABIT_TITLE_KEYWORD = "calorie"

# Habit presets offered by the add_habit service
HABIT_PRESET_CALORIE_GOAL = "calorie_goal"
HABIT_PRESET_DRINK_WATER = "drink_water"
HABIT_PRESET_READ = "read"
HABIT_PRESET_MEDITATE = "meditate"
HABIT_PRESET_EXERCISE = "exercise"

HABIT_PRESETS: dict[str, dict] = {
    HABIT_PRESET_CALORIE_GOAL: {
        DATA_HABIT_TITLE: "Calorie Goal",
        DATA_HABIT_KIND: HABIT_KIND_NUMERIC,
        DATA_HABIT_TARGET: 1800,
        DATA_HABIT_MAX_TARGET: 2200,
        DATA_HABIT_UNIT: "kcal",
    },
    HABIT_PRESET_DRINK_WATER: {
        DATA_HABIT_TITLE: "Drink Water",
        DATA_HABIT_KIND: HABIT_KIND_NUMERIC,
        DATA_HABIT_TARGET: 8,
        DATA_HABIT_UNIT: "cups",
    },
    HABIT_PRESET_READ: {
        DATA_HABIT_TITLE: "Read",
        DATA_HABIT_KIND: HABIT_KIND_NUMERIC,
        DATA_HABIT_TARGET: 15,
        DATA_HABIT_UNIT: "mins",
    },
    HABIT_PRESET_MEDITATE: {
        DATA_HABIT_TITLE: "Meditate",
        DATA_HABIT_KIND: HABIT_KIND_BOOLEAN,
        DATA_HABIT_TARGET: 1,
        DATA_HABIT_UNIT: "",
    },
    HABIT_PRESET_EXERCISE: {
        DATA_HABIT_TITLE: "Exercise",
        DATA_HABIT_KIND: HABIT_KIND_BOOLEAN,
        DATA_HABIT_TARGET: 1,
        DATA_HABIT_UNIT: "",
    },
}

# ------------------------------------------------------------------------------------------------
# Plant Stages and Health
# ------------------------------------------------------------------------------------------------
PLANT_STAGE_SEED = "seed"
PLANT_STAGE_SPROUT = "sprout"
PLANT_STAGE_SAPLING = "sapling"
PLANT_STAGE_TREE = "tree"
PLANT_STAGE_FLOWERING = "flowering"
PLANT_STAGE_MYTHICAL = "mythical"

# Ordered: index is growth tier
PLANT_STAGES = [
    PLANT_STAGE_SEED,
    PLANT_STAGE_SPROUT,
    PLANT_STAGE_SAPLING,
    PLANT_STAGE_TREE,
    PLANT_STAGE_FLOWERING,
    PLANT_STAGE_MYTHICAL,
]

# Experience required to leave each stage
PLANT_STAGE_THRESHOLDS: dict[str, float] = {
    PLANT_STAGE_SEED: 50,
    PLANT_STAGE_SPROUT: 150,
    PLANT_STAGE_SAPLING: 350,
    PLANT_STAGE_TREE: 700,
    PLANT_STAGE_FLOWERING: 1200,
    PLANT_STAGE_MYTHICAL: float("inf"),
}

PLANT_HEALTH_THRIVING = "thriving"
PLANT_HEALTH_WILTING = "wilting"
PLANT_HEALTH_WITHERED = "withered"
PLANT_HEALTH_DEAD = "dead"

# Ordered: index is severity
PLANT_HEALTH_STATES = [
    PLANT_HEALTH_THRIVING,
    PLANT_HEALTH_WILTING,
    PLANT_HEALTH_WITHERED,
    PLANT_HEALTH_DEAD,
]

# Single-step healing applied on each completion
PLANT_HEALING_MAP = {
    PLANT_HEALTH_WILTING: PLANT_HEALTH_THRIVING,
    PLANT_HEALTH_WITHERED: PLANT_HEALTH_WILTING,
}

EXPERIENCE_PER_COMPLETION = 10
DEFAULT_PLANT_LEVEL = 1

# Decay gaps (whole calendar days since last interaction)
DECAY_GAP_WILTING = 2
DECAY_GAP_WITHERED = 3
DECAY_GAP_DEAD = 4

# ------------------------------------------------------------------------------------------------
# Preferences
# ------------------------------------------------------------------------------------------------
THEME_LIGHT = "light"
THEME_DARK = "dark"
THEMES = [THEME_LIGHT, THEME_DARK]

TAB_HOME = "home"
TAB_CALENDAR = "calendar"
TAB_SOCIAL = "social"
TAB_FOOD = "food"
TAB_DONATION = "donation"
TABS = [TAB_HOME, TAB_CALENDAR, TAB_SOCIAL, TAB_FOOD, TAB_DONATION]

# ------------------------------------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------------------------------------
DEFAULT_ZERO = 0
DEFAULT_HABIT_KIND = HABIT_KIND_BOOLEAN
DEFAULT_HABIT_TARGET = 1
DEFAULT_HABIT_UNIT = ""
DEFAULT_THEME = THEME_LIGHT
DEFAULT_LAST_ACTIVE_TAB = TAB_HOME
DEFAULT_WEEKLY_WINDOW_DAYS = 7

# Float precision for progress rounding
DATA_FLOAT_PRECISION = 2

# Friend codes
FRIEND_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
FRIEND_CODE_LENGTH = 6

# ------------------------------------------------------------------------------------------------
# Reducer Events
# ------------------------------------------------------------------------------------------------
EVENT_SESSION_START = "session_start"
EVENT_COMPLETE_ONBOARDING = "complete_onboarding"
EVENT_SET_NAME = "set_name"
EVENT_TOGGLE_HABIT = "toggle_habit"
EVENT_ADD_HABIT_PROGRESS = "add_habit_progress"
EVENT_ADD_HABIT = "add_habit"
EVENT_DELETE_HABIT = "delete_habit"
EVENT_LOG_FOOD = "log_food"
EVENT_REVIVE_PLANT = "revive_plant"
EVENT_SET_THEME = "set_theme"
EVENT_SET_ACTIVE_TAB = "set_active_tab"
EVENT_ADD_FRIEND = "add_friend"
EVENT_ADD_GROUP = "add_group"

# Payload keys
PAYLOAD_HABIT_ID = "habit_id"
PAYLOAD_DATE = "date"
PAYLOAD_AMOUNT = "amount"
PAYLOAD_HABIT = "habit"
PAYLOAD_FOOD_LOG = "food_log"
PAYLOAD_NAME = "name"
PAYLOAD_FRIEND_CODE = "friend_code"
PAYLOAD_THEME = "theme"
PAYLOAD_TAB = "tab"
PAYLOAD_PROFILE = "profile"
PAYLOAD_GROUP = "group"

# ------------------------------------------------------------------------------------------------
# Manager Signals (instance-scoped via get_event_signal)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_ALL_HABITS_COMPLETED = "all_habits_completed"
SIGNAL_SUFFIX_MOTIVATION_UPDATED = "motivation_updated"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_TOGGLE_HABIT = "toggle_habit"
SERVICE_ADD_HABIT_PROGRESS = "add_habit_progress"
SERVICE_ADD_HABIT = "add_habit"
SERVICE_DELETE_HABIT = "delete_habit"
SERVICE_LOG_FOOD = "log_food"
SERVICE_REVIVE_PLANT = "revive_plant"
SERVICE_SET_NAME = "set_name"
SERVICE_SET_THEME = "set_theme"
SERVICE_SET_ACTIVE_TAB = "set_active_tab"
SERVICE_ADD_FRIEND = "add_friend"
SERVICE_CREATE_GROUP = "create_group"
SERVICE_JOIN_GROUP = "join_group"
SERVICE_ESTIMATE_METRIC = "estimate_metric"
SERVICE_ANALYZE_FOOD_IMAGE = "analyze_food_image"
SERVICE_GET_MOTIVATION = "get_motivation"
SERVICE_GET_STATISTICS = "get_statistics"

# Service fields
FIELD_HABIT_ID = "habit_id"
FIELD_DATE = "date"
FIELD_AMOUNT = "amount"
FIELD_TITLE = "title"
FIELD_KIND = "kind"
FIELD_TARGET = "target"
FIELD_MAX_TARGET = "max_target"
FIELD_UNIT = "unit"
FIELD_PRESET = "preset"
FIELD_NAME = "name"
FIELD_CALORIES = "calories"
FIELD_THEME = "theme"
FIELD_TAB = "tab"
FIELD_CODE = "code"
FIELD_DESCRIPTION = "description"
FIELD_IMAGE_PATH = "image_path"
FIELD_DAYS = "days"

# Service response keys
RESPONSE_VALUE = "value"
RESPONSE_FOOD = "food"
RESPONSE_MESSAGE = "message"
RESPONSE_HABIT_ID = "habit_id"
RESPONSE_GROUP = "group"
RESPONSE_FRIEND = "friend"
RESPONSE_WEEKLY = "weekly"
RESPONSE_CALORIES_TODAY = "calories_today"
RESPONSE_CALORIES_LOGGED_TODAY = "calories_logged_today"
RESPONSE_COMPLETION_RATIO_TODAY = "completion_ratio_today"

# ------------------------------------------------------------------------------------------------
# Estimation Service (Gemini)
# ------------------------------------------------------------------------------------------------
GEMINI_MODEL = "gemini-2.5-flash"
GEMINI_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
)
ESTIMATION_REQUEST_TIMEOUT = 30
MOTIVATION_FALLBACK_NO_KEY = "Remember to drink water and track your habits!"
MOTIVATION_FALLBACK_ERROR = "I'm ready to grow with you today!"

# ------------------------------------------------------------------------------------------------
# Directory Service (mock)
# ------------------------------------------------------------------------------------------------
DIRECTORY_SIMULATED_LATENCY = 0.6

# ------------------------------------------------------------------------------------------------
# Sensors
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_PLANT_STAGE = "_plant_stage"
SENSOR_UID_SUFFIX_PLANT_HEALTH = "_plant_health"
SENSOR_UID_SUFFIX_PLANT_EXPERIENCE = "_plant_experience"
SENSOR_UID_SUFFIX_CALORIES_TODAY = "_calories_today"
SENSOR_UID_SUFFIX_HABIT_STREAK = "_habit_streak"

TRANS_KEY_SENSOR_PLANT_STAGE = "plant_stage"
TRANS_KEY_SENSOR_PLANT_HEALTH = "plant_health"
TRANS_KEY_SENSOR_PLANT_EXPERIENCE = "plant_experience"
TRANS_KEY_SENSOR_CALORIES_TODAY = "calories_today"
TRANS_KEY_SENSOR_HABIT_STREAK = "habit_streak"
TRANS_KEY_SENSOR_ATTR_HABIT_TITLE = "habit_title"

ATTR_EXPERIENCE = "experience"
ATTR_LEVEL = "level"
ATTR_HEALTH = "health"
ATTR_STAGE_PROGRESS = "stage_progress"
ATTR_NEXT_STAGE_THRESHOLD = "next_stage_threshold"
ATTR_LAST_INTERACTION_DATE = "last_interaction_date"
ATTR_FRIEND_CODE = "friend_code"
ATTR_HABIT_ID = "habit_id"
ATTR_HABIT_KIND = "kind"
ATTR_TARGET = "target"
ATTR_MAX_TARGET = "max_target"
ATTR_UNIT = "unit"
ATTR_PROGRESS_TODAY = "progress_today"
ATTR_STATUS_TODAY = "status_today"
ATTR_COMPLETED_TODAY = "completed_today"
ATTR_FOOD_LOGS_TODAY = "food_logs_today"
ATTR_CALORIE_HABIT_ID = "calorie_habit_id"
ATTR_MOTIVATION = "motivation"

# ------------------------------------------------------------------------------------------------
# Translation Keys / Messages
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_INVALID_NAME = "invalid_name"

MSG_NO_ENTRY_FOUND = "No Bloom entry found"
MSG_HABIT_NOT_FOUND = "Habit '{habit_id}' not found"
MSG_HABIT_WRONG_KIND = "Habit '{habit_id}' is not a {kind} habit"
MSG_HABIT_TITLE_REQUIRED = "Habit title is required"
MSG_HABIT_INVALID_RANGE = "Maximum target must be greater than or equal to target"
MSG_PLANT_NOT_DEAD = "Only a dead plant can be revived"
MSG_NAME_REQUIRED = "Name is required"
MSG_CANNOT_ADD_SELF = "You can't add yourself!"
MSG_ALREADY_FRIENDS = "You are already friends!"
MSG_ALREADY_IN_GROUP = "You are already in this group!"
MSG_FRIEND_NOT_FOUND = "Friend not found"
MSG_GROUP_NOT_FOUND = "Group not found"
MSG_GROUP_NAME_REQUIRED = "Group name is required"
MSG_CONNECTION_ERROR = "Connection error. Try again."
MSG_IMAGE_READ_ERROR = "Unable to read image '{path}'"
