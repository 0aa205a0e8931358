from __future__ import annotations

import gzip
import struct
from io import BytesIO
from zipfile import ZipFile

import pytest
from msgspec import json
from nbtlib import File
from PIL import Image

from voxelcraft.core.voxels import Voxel
from voxelcraft.export.axiom import MAGIC, encode_axiom, export_axiom
from voxelcraft.export.datapack import COMMANDS_PER_FILE, encode_datapack, namespace
from voxelcraft.export.grid import UnsupportedFormatError
from voxelcraft.export.litematic import encode_litematic, export_litematic
from voxelcraft.export.sponge import encode_schematic, export_schematic
from voxelcraft.export.structure import encode_nbt_structure, export_nbt_structure
from voxelcraft.export.thumbnail import placeholder, render_thumbnail

VOXELS = [
    Voxel(position=(10, 64, 10), type="stone"),
    Voxel(position=(11, 66, 10), type="oak_stairs", properties="facing=east"),
    Voxel(position=(10, 64, 11), type="glass"),
]


def read_nbt(data: bytes, *, gzipped=True) -> File:
    if gzipped:
        data = gzip.decompress(data)
    return File.parse(BytesIO(data))


def unpack_spanning(words: list[int], bits: int, count: int) -> list[int]:
    joined = sum((word & (2**64 - 1)) << (64 * i) for i, word in enumerate(words))
    return [(joined >> (i * bits)) & ((1 << bits) - 1) for i in range(count)]


def read_varints(data: bytes) -> list[int]:
    values, value, shift = [], 0, 0
    for byte in data:
        value |= (byte & 0x7F) << shift
        shift += 7
        if not byte & 0x80:
            values.append(value)
            value, shift = 0, 0
    return values


class TestStructure:
    def test_layout(self):
        root = read_nbt(encode_nbt_structure(VOXELS, "1.21"))

        assert root["DataVersion"] == 3953
        assert [int(v) for v in root["size"]] == [2, 3, 2]
        assert [entry["Name"] for entry in root["palette"]] == [
            "minecraft:stone",
            "minecraft:oak_stairs",
            "minecraft:glass",
        ]
        assert root["palette"][1]["Properties"] == {"facing": "east"}
        assert "Properties" not in root["palette"][0]
        assert [
            ([int(v) for v in block["pos"]], int(block["state"]))
            for block in root["blocks"]
        ] == [([0, 0, 0], 0), ([1, 2, 0], 1), ([0, 0, 1], 2)]
        assert len(root["entities"]) == 0

    def test_legacy_version_keeps_modern_names(self):
        root = read_nbt(encode_nbt_structure(VOXELS, "1.12"))
        assert root["DataVersion"] == 1343
        assert root["palette"][1]["Name"] == "minecraft:oak_stairs"

    def test_export(self, tmp_path):
        path = export_nbt_structure(VOXELS, tmp_path / "my.house")
        assert path == tmp_path / "my.house.nbt"
        assert read_nbt(path.read_bytes())["DataVersion"] == 3953


class TestSchematic:
    def test_layout(self):
        root = read_nbt(encode_schematic(VOXELS, "1.20"))

        assert root.root_name == "Schematic"
        assert root["Version"] == 3
        assert root["DataVersion"] == 3700
        assert (root["Width"], root["Height"], root["Length"]) == (2, 3, 2)
        assert root["Blocks"]["Palette"] == {
            "minecraft:air": 0,
            "minecraft:stone": 1,
            "minecraft:oak_stairs[facing=east]": 2,
            "minecraft:glass": 3,
        }

        data = bytes(b & 0xFF for b in root["Blocks"]["Data"].tolist())
        cells = read_varints(data)
        assert len(cells) == 12
        # index = (y * length + z) * width + x
        assert cells[0] == 1
        assert cells[(2 * 2 + 0) * 2 + 1] == 2
        assert cells[(0 * 2 + 1) * 2 + 0] == 3
        assert cells.count(0) == 9

    def test_export(self, tmp_path):
        path = export_schematic(VOXELS, tmp_path / "house")
        assert path.name == "house.schem"


class TestLitematic:
    def test_layout(self):
        root = read_nbt(encode_litematic(VOXELS, "1.21", name="house", author="me"))

        assert root["Version"] == 5
        assert root["MinecraftDataVersion"] == 3953

        metadata = root["Metadata"]
        assert metadata["Name"] == "house"
        assert metadata["Author"] == "me"
        assert metadata["Description"] == "Generated for Minecraft 1.21+"
        assert metadata["TotalBlocks"] == 3
        assert metadata["TotalVolume"] == 12
        assert metadata["EnclosingSize"] == {"x": 2, "y": 3, "z": 2}

        region = root["Regions"]["house"]
        assert [entry["Name"] for entry in region["BlockStatePalette"]] == [
            "minecraft:air",
            "minecraft:stone",
            "minecraft:oak_stairs",
            "minecraft:glass",
        ]
        words = region["BlockStates"].tolist()
        assert len(words) == 1
        cells = unpack_spanning(words, 2, 12)
        assert cells[0] == 1
        assert cells[(2 * 2 + 0) * 2 + 1] == 2
        assert cells[(0 * 2 + 1) * 2 + 0] == 3

    def test_values_span_words(self):
        # 5 palette entries -> 3 bits, so some cells straddle two longs
        voxels = [
            Voxel(position=(x, 0, 0), type=block)
            for x, block in enumerate(["stone", "glass", "dirt", "sand"] * 8)
        ]
        region = read_nbt(encode_litematic(voxels, name="row"))["Regions"]["row"]
        words = region["BlockStates"].tolist()
        assert len(words) == 2
        assert unpack_spanning(words, 3, 32) == [1, 2, 3, 4] * 8

    def test_export(self, tmp_path):
        path = export_litematic(VOXELS, tmp_path / "house")
        assert path.name == "house.litematic"
        region = read_nbt(path.read_bytes())["Regions"]["house"]
        assert region["Size"] == {"x": 2, "y": 3, "z": 2}


class TestAxiom:
    def split(self, data: bytes):
        assert data.startswith(MAGIC)
        offset = len(MAGIC)
        metadata_length = int.from_bytes(data[offset : offset + 3], "big")
        offset += 3
        metadata = read_nbt(data[offset : offset + metadata_length], gzipped=False)
        offset += metadata_length

        (png_length,) = struct.unpack(">I", data[offset : offset + 4])
        offset += 4
        png = data[offset : offset + png_length]
        offset += png_length

        (blocks_length,) = struct.unpack(">I", data[offset : offset + 4])
        offset += 4
        blocks = read_nbt(data[offset : offset + blocks_length])
        assert offset + blocks_length == len(data)
        return metadata, png, blocks

    def test_layout(self):
        metadata, png, blocks = self.split(
            encode_axiom(VOXELS, name="house", author="me")
        )

        assert metadata["Name"] == "house"
        assert metadata["Author"] == "me"
        assert metadata["BlockCount"] == 3
        assert metadata["ThumbnailYaw"] == 135
        assert metadata["ThumbnailPitch"] == 30
        assert Image.open(BytesIO(png)).size == (96, 96)

        assert blocks["DataVersion"] == 3953
        (region,) = blocks["BlockRegion"]
        assert (region["X"], region["Y"], region["Z"]) == (0, 0, 0)
        states = region["BlockStates"]
        assert [entry["Name"] for entry in states["palette"]] == [
            "minecraft:structure_void",
            "minecraft:stone",
            "minecraft:oak_stairs",
            "minecraft:glass",
        ]

        words = [w & (2**64 - 1) for w in states["data"].tolist()]
        # 4 bits per cell, 16 cells per long, never straddling
        assert len(words) == 4096 // 16

        def cell(x, y, z):
            word, slot = divmod(y * 256 + z * 16 + x, 16)
            return (words[word] >> (slot * 4)) & 0xF

        assert cell(0, 0, 0) == 1
        assert cell(1, 2, 0) == 2
        assert cell(0, 0, 1) == 3
        assert cell(5, 5, 5) == 0

    def test_regions(self):
        voxels = [
            Voxel(position=(0, 0, 0), type="stone"),
            Voxel(position=(16, 0, 0), type="stone"),
            Voxel(position=(0, 0, 40), type="stone"),
        ]
        _, _, blocks = self.split(encode_axiom(voxels))
        keys = [(r["X"], r["Y"], r["Z"]) for r in blocks["BlockRegion"]]
        assert sorted(keys) == [(0, 0, 0), (0, 0, 2), (1, 0, 0)]

    def test_wide_palette_does_not_span(self):
        # 17 entries with the void -> 5 bits, 12 cells per long
        colors = (
            "white orange magenta light_blue yellow lime pink gray "
            "light_gray cyan purple blue brown green red black"
        ).split()
        voxels = [
            Voxel(position=(x, 0, 0), type=f"{color}_wool")
            for x, color in enumerate(colors)
        ]
        _, _, blocks = self.split(encode_axiom(voxels))
        words = blocks["BlockRegion"][0]["BlockStates"]["data"].tolist()
        assert len(words) == -(-4096 // 12)
        # cell 12 opens the second long
        assert words[1] & 0x1F == 13
        assert (words[0] >> 60) & 0xF == 0

    def test_thumbnail_failure_uses_placeholder(self, monkeypatch):
        from voxelcraft.export import axiom

        def broken(*args, **kwargs):
            raise OSError("no font")

        monkeypatch.setattr(axiom, "render_thumbnail", broken)
        _, png, _ = self.split(encode_axiom(VOXELS))
        assert png == placeholder()

    def test_export(self, tmp_path):
        path = export_axiom(VOXELS, tmp_path / "house")
        assert path.name == "house.bp"
        metadata, _, _ = self.split(path.read_bytes())
        assert metadata["Name"] == "house"


class TestThumbnail:
    def test_render(self):
        image = Image.open(BytesIO(render_thumbnail(VOXELS, size=64)))
        assert image.format == "PNG"
        assert image.size == (64, 64)

    def test_placeholder(self):
        assert Image.open(BytesIO(placeholder())).size == (8, 8)


class TestDatapack:
    def read(self, data: bytes) -> dict[str, str]:
        with ZipFile(BytesIO(data)) as archive:
            return {name: archive.read(name).decode() for name in archive.namelist()}

    def test_layout(self):
        files = self.read(encode_datapack(VOXELS, "1.21", name="My House"))

        assert set(files) == {
            "pack.mcmeta",
            "README.txt",
            "data/minecraft/tags/function/load.json",
            "data/my_house/function/build.mcfunction",
            "data/my_house/function/load.mcfunction",
            "data/my_house/function/clear.mcfunction",
        }
        assert json.decode(files["pack.mcmeta"]) == {
            "pack": {"pack_format": 48, "description": "My House\nFor Minecraft 1.21+"}
        }
        assert json.decode(files["data/minecraft/tags/function/load.json"]) == {
            "values": ["my_house:load"]
        }

        build = files["data/my_house/function/build.mcfunction"].splitlines()
        assert build[:3] == [
            "# Generated Structure",
            "# Target: Minecraft 1.21+",
            "# Blocks: 3",
        ]
        assert "setblock ~0 ~0 ~0 minecraft:stone" in build
        assert build[-1].startswith("tellraw @a ")
        assert json.decode(build[-1].removeprefix("tellraw @a ")) == {
            "text": "[Builder] Done! (3 blocks)",
            "color": "green",
        }

        clear = files["data/my_house/function/clear.mcfunction"].splitlines()
        assert clear[1] == "fill ~0 ~0 ~0 ~1 ~2 ~1 air"
        assert "/function my_house:build" in files["README.txt"]

    def test_older_function_folder(self):
        files = self.read(encode_datapack(VOXELS, "1.20"))
        assert "data/structure/functions/build.mcfunction" in files
        assert json.decode(files["pack.mcmeta"])["pack"]["pack_format"] == 15

    def test_multi_part(self, monkeypatch):
        from voxelcraft.export import datapack

        monkeypatch.setattr(datapack, "COMMANDS_PER_FILE", 2)
        files = self.read(encode_datapack(VOXELS, name="tower"))

        folder = "data/tower/function"
        build = files[f"{folder}/build.mcfunction"]
        assert "# Parts: 2" in build
        assert "function tower:build_part1\nfunction tower:build_part2\n" in build
        assert len(files[f"{folder}/build_part1.mcfunction"].splitlines()) == 2
        assert len(files[f"{folder}/build_part2.mcfunction"].splitlines()) == 1

    @pytest.mark.parametrize("version", ["1.12", "1.8"])
    def test_legacy_versions(self, version):
        with pytest.raises(UnsupportedFormatError):
            encode_datapack(VOXELS, version)

    def test_namespace(self):
        assert namespace("Castle-Keep v2") == "castle_keep_v2"
        assert COMMANDS_PER_FILE == 60_000
