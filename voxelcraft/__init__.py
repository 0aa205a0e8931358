"""Build Minecraft structures from scripts and export them for any game version."""

import builtins
from sys import stdin

APP_NAME = "voxelcraft"
__version__ = "0.3.0"


if not stdin.isatty():

    def input_abort(*args, **kwargs):
        raise EOFError

    builtins.input = input_abort
