import pytest

from voxelcraft.core.script import ScriptError, extract_code, run_script

SCRIPT = """\
for x in range(3):
    builder.set(x, 0, 0, "stone")
"""


def test_plain_code():
    assert extract_code(SCRIPT) == SCRIPT


def test_closed_fences_are_joined():
    text = (
        "Here is the base:\n```python\nbuilder.set(0, 0, 0, 'stone')\n```\n"
        "and the roof:\n```\nbuilder.set(0, 1, 0, 'oak_planks')\n```\n"
    )
    code = extract_code(text)
    assert "builder.set(0, 0, 0, 'stone')" in code
    assert "builder.set(0, 1, 0, 'oak_planks')" in code
    assert "Here is" not in code


def test_unclosed_fence():
    text = "Some words\n```py\nbuilder.set(0, 0, 0, 'stone')\n"
    assert extract_code(text) == "builder.set(0, 0, 0, 'stone')\n"


def test_run_script():
    builder = run_script(SCRIPT)
    assert [tuple(voxel.position) for voxel in builder.snapshot()] == [
        (0, 0, 0),
        (1, 0, 0),
        (2, 0, 0),
    ]


def test_run_markdown_script():
    builder = run_script(f"# House\n\n```python\n{SCRIPT}```\n")
    assert len(builder.snapshot()) == 3


def test_script_error():
    with pytest.raises(ScriptError) as e:
        run_script("builder.set(0, 0, 0)")
    assert str(e.value).startswith("TypeError:")
    assert isinstance(e.value.error, TypeError)


def test_syntax_error():
    with pytest.raises(ScriptError, match="SyntaxError"):
        run_script("builder.set(")


def test_scripts_are_isolated():
    run_script("builder.set_priority(50)")
    builder = run_script("builder.set(0, 0, 0, 'stone')")
    assert builder.current_priority == 0
    assert builder.snapshot()[0].priority == 0
