"""
Memory Management Visualizer — Contiguous Allocation & Fragmentation

This application provides an interactive simulation and visualization of
single-level contiguous memory allocation:
    - First-fit allocation with simulated internal and external fragmentation
    - Compaction
    - Swapping processes out to a swap area and restoring them
    - Relocation of a single process

The simulation itself lives in engine.py; this file only wires Streamlit
widgets to the engine and draws its state with Plotly.

Run with:
    streamlit run app.py
"""

# =============================================================================
# IMPORTS
# =============================================================================

import streamlit as st                 # Web application framework

from engine import MemoryEngine, SimulationConfig
from utils import block_rows, memory_figure, swap_rows


# Configure the Streamlit page
st.set_page_config(page_title="Memory Management Visualizer", layout="wide")

# -----------------------------------------------------------------------------
# SIDEBAR NAVIGATION
# -----------------------------------------------------------------------------

page = st.sidebar.radio("Choose View", ["Simulator", "Concepts"])

st.title("Memory Management Visualizer — Contiguous Allocation & Fragmentation")

# =============================================================================
# CONCEPTS PAGE - Educational Content
# =============================================================================

if page == "Concepts":
    st.header("Operating System Concepts Used in This Simulator")
    st.markdown(
        """
        ### **1. Contiguous Allocation**
        - Every process occupies one contiguous range of memory.
        - Memory is a sequence of *process* blocks and *free* blocks.

        ### **2. First-Fit**
        - The first free block large enough for the request is used.
        - Whatever is left over stays free right after the process.

        ### **3. Internal Fragmentation**
        - A process reserves more than it really uses.
        - The gap (reserved − used) is wasted inside the block.

        ### **4. External Fragmentation**
        - Free memory exists, but in pieces too small for the next request.
        - The simulator sometimes leaves a tiny free fragment in front of a new process.

        ### **5. Compaction**
        - All processes slide to the start of memory.
        - All free space becomes one block at the end.

        ### **6. Swapping**
        - A process is moved out of memory to the swap area; its space becomes free.
        - Restoring it needs a free block at least as large as the process.

        ### **7. Relocation**
        - A single process is moved into another free block that can hold it.
        """
    )
    st.stop()

# =============================================================================
# SIMULATOR PAGE - Main Interactive Interface
# =============================================================================

st.sidebar.header("Simulation Settings")

total_size = st.sidebar.number_input(
    "Total memory (MB)", min_value=50, max_value=1000, value=100, step=10
)

fragment_probability = st.sidebar.slider(
    "Fragmentation probability", min_value=0.0, max_value=1.0, value=0.3, step=0.05
)

# Seed 0 means "no seed": a fresh random sequence every session
seed = st.sidebar.number_input("Random seed (0 = random)", min_value=0, value=0, step=1)

# -----------------------------------------------------------------------------
# SESSION STATE - Engine Persistence
# -----------------------------------------------------------------------------

config = SimulationConfig(
    total_size=int(total_size),
    fragment_probability=fragment_probability,
    seed=int(seed) or None,
)

if 'engine' not in st.session_state:
    st.session_state.engine = MemoryEngine(config)
else:
    # Capacity or seed changed: start a new simulation
    eng = st.session_state.engine
    if eng.config.total_size != config.total_size or eng.config.seed != config.seed:
        st.session_state.engine = MemoryEngine(config)

engine: MemoryEngine = st.session_state.engine
engine.config.fragment_probability = fragment_probability

if st.sidebar.button("Reset Simulation"):
    engine.reset()
    st.sidebar.success("Simulation reset")

# =============================================================================
# MAIN CONTENT AREA - Two Column Layout
# =============================================================================

col1, col2 = st.columns([1, 2])

# -----------------------------------------------------------------------------
# LEFT COLUMN - Controls, Swap Area and Event Log
# -----------------------------------------------------------------------------

with col1:
    st.subheader("Controls")

    process_size = st.slider("Process size (MB)", min_value=5, max_value=50, value=10)

    if st.button("Add Process"):
        if engine.allocate(process_size):
            st.success(engine.event_log[-1])
        else:
            st.warning(engine.event_log[-1])

    if st.button("Compact"):
        engine.compact()
        st.info(engine.event_log[-1])

    if st.button("Swap Out"):
        engine.swap_out()
        st.info(engine.event_log[-1])

    if st.button("Relocate"):
        engine.relocate()
        st.info(engine.event_log[-1])

    st.subheader("Swap Area")
    swapped = engine.get_swapped()
    if len(swapped) == 0:
        st.write("No swapped processes")
    else:
        for proc in swapped:
            if st.button(f"Restore {proc.label} ({proc.size} MB)", key=f"restore-{proc.id}"):
                if engine.swap_in(proc.id):
                    st.rerun()
                st.warning(engine.event_log[-1])
        st.table(swap_rows(swapped))

    st.subheader("Event Log")
    for ev in engine.event_log[-20:][::-1]:
        st.write(ev)

# -----------------------------------------------------------------------------
# RIGHT COLUMN - Visualizations
# -----------------------------------------------------------------------------

with col2:
    st.subheader("Memory Map")
    blocks = engine.get_state()
    st.plotly_chart(memory_figure(blocks), use_container_width=True)

    st.subheader("Statistics")
    stats = engine.get_fragmentation_metrics(process_size)

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Used", f"{stats['used']} MB")
    m2.metric("Free", f"{stats['free']} MB")
    m3.metric("External Frag.", f"{stats['external_fragmentation']} MB")
    m4.metric("Internal Frag.", f"{stats['internal_fragmentation']} MB")
    st.progress(stats['utilization'], text=f"Utilization {stats['utilization']:.0%}")

    st.subheader("Blocks (address order)")
    st.table(block_rows(blocks))

st.markdown("---")
st.markdown(
    "**Usage tips**:\n"
    "- Add a few processes, then swap some out to leave holes in memory.\n"
    "- Raise the process size: small holes count as external fragmentation.\n"
    "- Use **Compact** to merge all holes, or **Relocate** to move one process."
)
