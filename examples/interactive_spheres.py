#!/usr/bin/env python3
"""Interactive viewer for the four-sphere material scene.

This script opens a preview window that first shows a color test gradient.
Pressing "Render" renders the material scene; "Save EXR" writes the current
linear render into the output directory.

Usage:
    python -m examples.interactive_spheres [--file-name NAME]

Rendering parameters come from the PATHTRACER_* environment variables.
"""

from __future__ import annotations

import argparse
import platform
import sys
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if platform.system() == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except RuntimeError:
            pass

    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except RuntimeError:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive viewer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(description="Interactive sphere viewer.")
    parser.add_argument(
        "--file-name",
        type=str,
        default=None,
        help="Name of the saved EXR file, without extension (default: sample_file)",
    )
    args = parser.parse_args()

    from src.pathtracer.logging_config import setup_logging

    setup_logging()

    # Initialize Taichi first (before importing modules that declare fields)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from src.pathtracer.preview.application import ApplicationMessage, ApplicationState
    from src.pathtracer.preview.interactive import InteractivePreview, has_display

    if not has_display():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    try:
        state = ApplicationState()
        if args.file_name:
            state.update(ApplicationMessage.FILE_NAME_CHANGED, args.file_name)
    except ValueError as e:
        # Covers InvalidRenderConfigError and rejected file names
        print(f"Error: {e}", file=sys.stderr)
        return 1

    preview = InteractivePreview(state)

    print("Starting interactive viewer...")
    print("  - Click 'Render' to render the scene")
    print(f"  - Click 'Save EXR' to write {state.output_path}")
    print("  - Close window to exit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
