"""Tests for plain-text grid rendering."""

import pytest

from ladderflow.core import GridFormatter, Instruction, energize, format_grid, layout

from tests.conftest import program

SELF_HOLD = program(("LD", "X0"), ("OR", "Y0"), ("ANI", "X1"), ("OUT", "Y0"))


@pytest.mark.parametrize(
    ("entry", "expected"),
    [
        (("LD", "X0"), "[X0]"),
        (("ANI", "X1"), "[/X1]"),
        (("LD_EQ", "D0", "K5"), "[D0=K5]"),
        (("OUT", "Y0"), "(Y0)"),
        (("SET", "Y0"), "(S Y0)"),
        (("RST", "C0"), "(R C0)"),
        (("MPS",), "MPS"),
        (("AND_EQ", "iStep", "K10"), "[iStep="),
        (("MOV", "K5", "D0"), "MOV K5>"),
    ],
)
def test_labels(entry, expected):
    """Each opcode renders its own label."""
    (inst,) = program(entry)
    assert GridFormatter.label(inst) == expected


def test_unknown_opcode_label_is_its_name():
    assert GridFormatter.label(Instruction(id=1, type="NOP")) == "NOP"


def test_empty_grid_renders_empty():
    assert format_grid([]) == ""


def test_self_hold_diagram_shape():
    """The seal-in contact renders under the start contact."""
    text = format_grid(layout(SELF_HOLD))
    lines = text.splitlines()

    # Row 0, the vertical link under the OR branch point, row 1.
    assert len(lines) == 3
    assert all(line.startswith("|") for line in lines)
    assert "[X0]" in lines[0] and "[/X1]" in lines[0] and "(Y0)" in lines[0]
    assert lines[1].strip(" |") == ""
    assert "[Y0]" in lines[2]


def test_live_wiring_is_highlighted():
    """Energized wire uses a different character."""
    grid = layout(SELF_HOLD)

    dark = format_grid(grid)
    live = format_grid(grid, energize(grid, {"X0": True}))

    assert "=" not in dark
    assert "=" in live
    assert live != dark
