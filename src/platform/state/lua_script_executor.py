"""
Lua Scripts for Kvrocks

Uses redis-py's built-in register_script(); scripts live next to the exchange repos.
"""

from pathlib import Path
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import NoScriptError

from src.platform.constant.path import LUA_SCRIPT_DIR
from src.platform.logging.loguru_io import Logger


class LuaScripts:
    """Loads every *.lua file in a directory and runs them by name"""

    def __init__(self, *, script_dir: Path = LUA_SCRIPT_DIR) -> None:
        self._script_dir = script_dir
        self._sources: dict[str, str] = {}
        self._scripts: dict[str, Any] = {}
        self._initialized: bool = False

    async def initialize(self, *, client: Redis) -> None:
        """Load Lua scripts (idempotent)"""
        if self._initialized:
            return

        for path in sorted(self._script_dir.glob('*.lua')):
            self._sources[path.stem] = path.read_text()
            self._scripts[path.stem] = client.register_script(self._sources[path.stem])
            Logger.base.info(f'🔥 [LUA] Registered {path.stem}')

        if not self._scripts:
            Logger.base.warning(f'⚠️ [LUA] No scripts found in {self._script_dir}')

        self._initialized = True

    async def run(self, name: str, *, client: Redis, keys: list[str], args: list[str]) -> Any:
        """Execute a registered script with auto-retry on NoScriptError"""
        if name not in self._scripts:
            raise RuntimeError(f'Lua script {name!r} not initialized')

        try:
            return await self._scripts[name](keys=keys, args=args, client=client)
        except NoScriptError:
            Logger.base.warning(f'⚠️ [LUA] {name} not found, re-registering...')
            self._scripts[name] = client.register_script(self._sources[name])
            return await self._scripts[name](keys=keys, args=args, client=client)


# Global singleton
lua_script_executor = LuaScripts()
