from inspect import getfile, getsourcelines
from os.path import basename
from time import time
from typing import Any, Callable

from src.platform.logging.loguru_io_config import (
    MAX_LOGGED_CONTENT_LENGTH,
    SENSITIVE_KEYWORDS,
    call_depth_var,
    chain_start_time_var,
)


MASK = '********'


def get_chain_start_time() -> float:
    if not (start_time := chain_start_time_var.get()):
        start_time = time()
        chain_start_time_var.set(start_time)
    return start_time


def build_call_target_func_path(func: Callable[..., Any]) -> str:
    target = getattr(func, '__func__', func)
    try:
        lineno = getsourcelines(target)[1]
    except (OSError, TypeError):
        lineno = 0
    return f'{basename(getfile(target))}::{func.__qualname__}:{lineno}'


def reset_call_depth() -> None:
    layer = max(call_depth_var.get() - 1, 0)
    call_depth_var.set(layer)
    if not layer:
        chain_start_time_var.set(0)


def should_mask_keyword(keyword: Any, value: Any) -> Any:
    return MASK if keyword in SENSITIVE_KEYWORDS else value


def truncate_content(content: Any) -> Any:
    text = str(content)
    if len(text) <= MAX_LOGGED_CONTENT_LENGTH:
        return content
    return f'{text[:MAX_LOGGED_CONTENT_LENGTH]}...(+{len(text) - MAX_LOGGED_CONTENT_LENGTH} chars)'
