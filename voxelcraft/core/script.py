from __future__ import annotations

import re

from .builder import VoxelBuilder

_CLOSED_FENCE = re.compile(r"```(?:python|py)?[ \t]*\n?([\s\S]*?)```")
_OPEN_FENCE = re.compile(r"```(?:python|py)?[ \t]*\n?([\s\S]*)$")


class ScriptError(Exception):
    def __init__(self, error: Exception):
        super().__init__(f"{type(error).__name__}: {error}")
        self.error = error


def extract_code(text: str) -> str:
    """Code of a build script, which may be wrapped in markdown fences.

    All closed fences are joined; otherwise an unclosed fence runs to the end.
    """

    if "```" not in text:
        return text
    if blocks := _CLOSED_FENCE.findall(text):
        return "\n".join(blocks)
    if (match := _OPEN_FENCE.search(text)) and match.group(1).strip():
        return match.group(1)
    return text


def run_script(text: str, *, filename="<build script>") -> VoxelBuilder:
    builder = VoxelBuilder()
    code = extract_code(text)
    try:
        exec(compile(code, filename, "exec"), {"builder": builder})
    except Exception as e:
        raise ScriptError(e) from e
    return builder
