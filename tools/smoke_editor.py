"""Headless smoke run of the EQ editor core using synthetic input."""
from __future__ import annotations

import argparse

from eqscope.dsp import FilterShape, signals
from eqscope.dsp.mapping import freq_to_x, gain_to_y
from eqscope.editor import EqPanel, ManualScheduler
from eqscope.engine import InMemoryEngine


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline EQ editor smoke test")
    parser.add_argument("--freq", type=float, default=1000.0, help="Band frequency in Hz")
    parser.add_argument("--gain", type=float, default=6.0, help="Gain dragged onto the band")
    parser.add_argument("--shape", choices=[s.name.lower() for s in FilterShape], default="bell")
    parser.add_argument("--ticks", type=int, default=30, help="Analyzer ticks to run")
    parser.add_argument("--width", type=int, default=800)
    parser.add_argument("--height", type=float, default=300.0)
    args = parser.parse_args()

    scheduler = ManualScheduler()
    source = signals.SyntheticSpectrum(seed=1)
    panel = EqPanel(args.width, args.height, source, scheduler)
    engine = InMemoryEngine()
    panel.attach_engine(engine)
    panel.start()

    controller = panel.controller
    controller.set_preview_shape(FilterShape[args.shape.upper()])
    x = freq_to_x(args.freq, args.width)
    controller.tap(x, gain_to_y(0.0, args.height))
    controller.drag_start(x, gain_to_y(0.0, args.height))
    controller.drag_update(x, gain_to_y(args.gain, args.height))
    controller.drag_end()
    scheduler.fire(args.ticks)

    band = panel.registry.selected
    curve = panel.curve()
    path = panel.spectrum_path()
    print("Band:", band)
    print("Curve y range:", float(curve.min()), float(curve.max()))
    print("Spectrum segments:", len(path.segments))
    print("Engine writes:", len(engine.writes))
    panel.dispose()


if __name__ == "__main__":
    main()
