from engine import PROCESS, Block
from utils import FREE_COLOR, block_rows, get_color, memory_figure, swap_rows

BLOCKS = (
    Block(1, 30, PROCESS, "P1", 27),
    Block(2, 10),
    Block(3, 60, PROCESS, "P2", 60),
)


def test_free_blocks_are_grey():
    assert get_color(BLOCKS[1]) == FREE_COLOR


def test_process_color_is_stable_per_label():
    moved = Block(99, 30, PROCESS, "P1", 27)
    assert get_color(moved) == get_color(BLOCKS[0])
    assert get_color(BLOCKS[0]).startswith("hsl(")


def test_memory_figure_has_one_segment_per_block():
    fig = memory_figure(BLOCKS)
    assert len(fig.data) == 3
    assert [bar.x[0] for bar in fig.data] == [30, 10, 60]
    assert fig.layout.barmode == "stack"
    assert fig.data[1].hovertext == "Free: 30-39 MB"


def test_block_rows_carry_start_addresses():
    rows = block_rows(BLOCKS)
    assert [r["start"] for r in rows] == [0, 30, 40]
    assert rows[0]["used"] == 27
    assert rows[1]["used"] == 0


def test_swap_rows():
    assert swap_rows(BLOCKS[:1]) == [{"id": 1, "process": "P1", "size": 30, "used": 27}]
