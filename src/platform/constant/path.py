from pathlib import Path


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Log directory
LOG_DIR = BASE_DIR / 'logs'

# Lua scripts shipped with the Kvrocks adapters
LUA_SCRIPT_DIR = (
    BASE_DIR / 'src' / 'service' / 'exchange' / 'driven_adapter' / 'repo' / 'kvrocks' / 'lua_script'
)
