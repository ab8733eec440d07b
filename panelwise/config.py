"""Global configuration: defaults, attribute names, constants."""

from pathlib import Path

# Project-local settings file, relative to the project root
SETTINGS_DIR = Path(".panelwise")
SETTINGS_FILE = "settings.json"

# Attribute names read from / written to drawing elements
ATTR_NAME = "NAME"
ATTR_TYPE = "TYPE"
ATTR_LOAD = "LOAD"
ATTR_CIRCUIT = "CKT"
ATTR_EMERGENCY = "SPARE1"

# Fraction of connected load drawn simultaneously, per fixture kind.
# Kinds missing from the table fall back to UNKNOWN_DEMAND_FACTOR.
DEFAULT_DEMAND_FACTORS = {
    "LIGHT": 0.6,
    "FAN": 0.6,
    "SOCKET": 0.2,
    "AC": 0.7,
}
UNKNOWN_DEMAND_FACTOR = 1.0

# Maximum used load per circuit, in watts
DEFAULT_CIRCUIT_CAPACITY_W = 800.0

# Name prefix marking an emergency fixture when no SPARE1 flag is set
DEFAULT_EMERGENCY_PREFIX = "E-"

# Circuit label prefixes
NORMAL_CIRCUIT_PREFIX = "C"
EMERGENCY_CIRCUIT_PREFIX = "EC"

# Raw TYPE attribute value -> element kind
DEFAULT_TYPE_ALIASES = {
    "MDB": "MAIN",
    "MAIN": "MAIN",
    "SDB": "SUB",
    "SUB": "SUB",
    "SB": "SWITCH",
    "SWITCH": "SWITCH",
    "LIGHT": "LIGHT",
    "LAMP": "LIGHT",
    "FAN": "FAN",
    "SOCKET": "SOCKET",
    "OUTLET": "SOCKET",
    "AC": "AC",
    "OTHER": "OTHER",
}

# Values of SPARE1 that mean "emergency"
EMERGENCY_FLAG_VALUES = ("1", "Y", "YES", "TRUE", "E", "EMERGENCY")
