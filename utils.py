# utils.py

import zlib

import plotly.graph_objects as go

FREE_COLOR = "#d3d3d3"


def get_color(block):
    """Return a color for a block: grey when free, a stable pastel per process label."""
    if block.is_free:
        return FREE_COLOR
    hue = zlib.crc32(block.label.encode()) % 360
    return f"hsl({hue}, 70%, 75%)"


def memory_figure(blocks, height=160):
    """Horizontal stacked bar of the memory map, one segment per block in address order."""
    fig = go.Figure()
    start = 0
    for block in blocks:
        text = block.label if block.is_free else f"{block.label} ({block.size})"
        hover = f"{block.label}: {start}-{start + block.size - 1} MB"
        if block.is_process:
            hover += f", uses {block.requested_size} MB"
        fig.add_trace(go.Bar(
            x=[block.size],
            y=["Memory"],
            orientation="h",
            text=text,
            marker_color=get_color(block),
            marker_line=dict(color="white", width=1),
            hovertext=hover,
            hoverinfo="text",
            name=block.label,
        ))
        start += block.size

    fig.update_layout(
        barmode="stack",
        height=height,
        showlegend=False,
        xaxis=dict(range=[0, max(start, 1)], title="Address (MB)"),
        yaxis=dict(showticklabels=False),
        margin=dict(l=10, r=10, t=10, b=40),
    )
    return fig


def block_rows(blocks):
    rows = []
    start = 0
    for block in blocks:
        rows.append({
            "id": block.id,
            "block": block.label,
            "start": start,
            "size": block.size,
            "used": block.requested_size if block.is_process else 0,
        })
        start += block.size
    return rows


def swap_rows(swapped):
    return [
        {"id": p.id, "process": p.label, "size": p.size, "used": p.requested_size}
        for p in swapped
    ]
