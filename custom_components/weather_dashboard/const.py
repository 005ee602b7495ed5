"""Constants for Weather Dashboard."""

# Integration identity
DOMAIN = "weather_dashboard"
DEFAULT_NAME = "Weather Dashboard"

PLATFORMS = ["sensor", "select"]

# Update interval (seconds) default used by coordinator
DEFAULT_UPDATE_INTERVAL = 30 * 60  # seconds
REFRESH_TIMEOUT = 60  # seconds, bounds one full four-category refresh

# Google Maps Platform endpoints
WEATHER_BASE = "https://weather.googleapis.com/v1"
GEOCODE_BASE = "https://maps.googleapis.com/maps/api/geocode/json"

CURRENT_PATH = "/currentConditions:lookup"
HOURLY_FORECAST_PATH = "/forecast/hours:lookup"
DAILY_FORECAST_PATH = "/forecast/days:lookup"
HOURLY_HISTORY_PATH = "/history/hours:lookup"

DEFAULT_FORECAST_HOURS = 24
DEFAULT_FORECAST_DAYS = 7
DEFAULT_HISTORY_HOURS = 24

# Storage keys (one durable key each)
STORE_VERSION = 1
STORE_THEME_KEY = f"{DOMAIN}.theme"
STORE_LOCATION_KEY = f"{DOMAIN}.last_location"

# Icon URI markers
ICON_DARK_SUFFIX = "_dark"
ICON_EXTENSION = ".svg"

# Theme modes
THEME_AUTO = "auto"
THEME_LIGHT = "light"
THEME_DARK = "dark"
THEME_MODES = [THEME_AUTO, THEME_LIGHT, THEME_DARK]

# Entity whose state stands in for the system color-scheme preference
DEFAULT_SYSTEM_THEME_ENTITY = "sun.sun"
DARK_STATES = ("below_horizon", "on", "dark")

# Data categories fetched on each refresh
CATEGORY_CURRENT = "current"
CATEGORY_HOURLY_FORECAST = "hourly_forecast"
CATEGORY_DAILY_FORECAST = "daily_forecast"
CATEGORY_HOURLY_HISTORY = "hourly_history"
CATEGORIES = [
    CATEGORY_CURRENT,
    CATEGORY_HOURLY_FORECAST,
    CATEGORY_DAILY_FORECAST,
    CATEGORY_HOURLY_HISTORY,
]

# ----- Config keys used by the flow and entry options -----
CONF_NAME = "name"
CONF_LATITUDE = "latitude"
CONF_LONGITUDE = "longitude"
CONF_API_KEY = "api_key"
CONF_LANGUAGE = "language_code"
CONF_UNITS_SYSTEM = "units_system"
CONF_THEME_MODE = "theme_mode"
CONF_SYSTEM_THEME_ENTITY = "system_theme_entity"
CONF_UPDATE_INTERVAL = "update_interval"

DEFAULT_LANGUAGE = "zh-CN"
UNITS_METRIC = "METRIC"
UNITS_IMPERIAL = "IMPERIAL"
DEFAULT_UNITS_SYSTEM = UNITS_METRIC
