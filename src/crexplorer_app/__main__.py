"""
Main entry point for crexplorer.

Loads a document tree, builds the explorer graph, runs the force
simulation on the Qt event loop until the camera has been framed, and
prints a summary.

Usage:
    python -m crexplorer_app tree.json [--ignore same] [--filter-a all_cre]
    crexplorer tree.json  (if installed)
"""

import argparse
import logging
import sys
import traceback
from pathlib import Path
from datetime import datetime

logger = logging.getLogger("crexplorer_app")


def setup_exception_hook():
    """Setup global exception hook to catch Qt callback exceptions."""
    log_file = Path.cwd() / "crash_log.txt"

    def exception_hook(exctype, value, tb):
        # Write to log file
        error_msg = ''.join(traceback.format_exception(exctype, value, tb))
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"UNHANDLED EXCEPTION at {datetime.now()}\n")
            f.write(f"{'='*60}\n")
            f.write(error_msg)
            f.write("\n")

        logger.critical("Unhandled exception (log saved to %s)\n%s", log_file, error_msg)

        # Call default handler
        sys.__excepthook__(exctype, value, tb)

    sys.excepthook = exception_hook


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="crexplorer",
        description="Build and frame the explorer force graph for a document tree.",
    )
    parser.add_argument("tree", type=Path, help="Tree JSON (nested list or flat 'documents' layout)")
    parser.add_argument("--ignore", action="append", default=None, metavar="TYPE",
                        help="Relation type to hide (repeatable; default: same)")
    parser.add_argument("--filter-a", default="", help="First endpoint selector (e.g. all_cre)")
    parser.add_argument("--filter-b", default="", help="Second endpoint selector (e.g. grouped_ISO)")
    parser.add_argument("--no-show-all", action="store_true", help="Apply the endpoint selectors")
    parser.add_argument("--config", type=Path, default=None, help="Settings override JSON")
    parser.add_argument("--width", type=int, default=None, help="Viewport width in pixels")
    parser.add_argument("--height", type=int, default=None, help="Viewport height in pixels")
    parser.add_argument("--timeout", type=int, default=30000, help="Give up after this many ms")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    """Run the explorer pipeline headless."""
    # Setup exception hook first
    setup_exception_hook()

    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Ensure src is in path for development
    src_path = Path(__file__).parent.parent
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))

    from dataclasses import replace
    from PyQt6.QtCore import QCoreApplication, QTimer

    from crexplorer_core.adapters.force_simulation import ForceSimulation
    from crexplorer_core.adapters.memory_tree import InMemoryTreeSource, TreeLoadError
    from crexplorer_app.viewmodels.explorer_vm import ExplorerGraphVM, ExplorerSettings, SettingsError
    from crexplorer_app.workers.qt_scheduler import QtScheduler
    from crexplorer_app.workers.simulation_ticker import SimulationTicker

    try:
        settings = ExplorerSettings.from_json(args.config) if args.config else ExplorerSettings()
    except SettingsError as e:
        logger.error("%s", e)
        return 2
    if args.ignore is not None:
        settings = replace(settings, default_ignore_types=args.ignore)
    sim_settings = settings.simulation
    if args.width:
        sim_settings = replace(sim_settings, width=args.width)
    if args.height:
        sim_settings = replace(sim_settings, height=args.height)

    try:
        tree = InMemoryTreeSource.from_json(args.tree)
    except TreeLoadError as e:
        logger.error("%s", e)
        return 2

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName("crexplorer")

    simulation = ForceSimulation(sim_settings)
    scheduler = QtScheduler(app)
    vm = ExplorerGraphVM(tree, scheduler, simulation, settings)
    ticker = SimulationTicker(simulation, parent=app)

    def report():
        pose = vm.camera_pose
        print(f"{vm.node_count} nodes, {vm.edge_count} connections")
        print(f"largest component: {len(vm.largest_component)} nodes")
        if pose is not None:
            print(f"camera: position={_fmt(pose.position)} look_at={_fmt(pose.look_at)}")
            print(f"distance={pose.distance:.1f} zoom=[{pose.min_distance:.1f}, {pose.max_distance:.1f}]")
        else:
            print("camera: fit-all")
        vm.teardown()
        ticker.stop()
        app.quit()

    vm.camera_framed.connect(report)
    vm.apply_filters(args.filter_a, args.filter_b, show_all=not args.no_show_all)

    if not vm.is_graph_visible or vm.node_count == 0:
        print(vm.empty_message or "Graph is empty.")
        vm.teardown()
        return 0

    def on_timeout():
        logger.error("Timed out waiting for the simulation to settle")
        vm.teardown()
        app.exit(1)

    ticker.start()
    QTimer.singleShot(args.timeout, on_timeout)
    return app.exec()


def _fmt(v) -> str:
    return "(" + ", ".join(f"{c:.1f}" for c in v) + ")"


if __name__ == "__main__":
    sys.exit(main())
