"""PyQt6 main window for the parametric EQ editor."""
from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np
from PyQt6 import QtCore, QtGui, QtWidgets
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg
from matplotlib.figure import Figure
from matplotlib.patches import PathPatch

from eqscope.config import EditorConfig
from eqscope.dsp.filters import FilterShape, Placement
from eqscope.dsp.mapping import freq_to_x, gain_to_y
from eqscope.dsp.signals import SyntheticSpectrum
from eqscope.editor import EqPanel
from eqscope.engine import InMemoryEngine
from .plotting import curve_xy, spline_fill_path, spline_to_path
from .scheduler import QtScheduler

logger = logging.getLogger(__name__)

INSTRUCTIONS = """Editing
=======
Click empty space to add a band with the selected shape.
Drag a handle to move it; the wheel changes Q (hold Shift for fine steps).
Double-click a handle to switch it on or off, or empty space to add a bell.
Right-click a handle to remove it. Solo listens to the selected band alone.
Store A/B with Shift+click on the A/B buttons, plain click recalls.
"""

SHAPE_COLOURS = {
    FilterShape.BELL: "#4a9eff",
    FilterShape.LOW_SHELF: "#ff9040",
    FilterShape.HIGH_SHELF: "#ffd040",
    FilterShape.LOW_CUT: "#ff4060",
    FilterShape.HIGH_CUT: "#ff4060",
    FilterShape.NOTCH: "#ff60c0",
    FilterShape.BAND_PASS: "#40ff90",
    FilterShape.TILT_SHELF: "#40c8ff",
    FilterShape.ALL_PASS: "#808090",
    FilterShape.BRICKWALL: "#ff4060",
}


class EQGraphCanvas(FigureCanvasQTAgg):
    """Draws the editor outputs in pixel coordinates and forwards mouse input."""

    def __init__(self, panel: EqPanel) -> None:
        fig = Figure(figsize=(6, 3), facecolor="#101014")
        super().__init__(fig)
        self.panel = panel
        self.ax = fig.add_axes([0, 0, 1, 1])
        self.ax.set_facecolor("#101014")
        self.ax.set_axis_off()
        self._grid_artists: List = []
        # The press that starts a double click may already have added a band.
        self._press_added = False
        self.spectrum_fill = self.ax.add_patch(PathPatch(spline_fill_path(panel.spectrum_path(), 1, 1), facecolor="#4a9eff", alpha=0.15, lw=0))
        self.spectrum_line = self.ax.add_patch(PathPatch(spline_to_path(panel.spectrum_path()), fill=False, edgecolor="#4a9eff", alpha=0.55, lw=1.2))
        self.peak_line, = self.ax.plot([], [], color="#4a9eff", alpha=0.3, lw=0.7)
        self.band_lines = [self.ax.plot([], [], lw=1.0)[0] for _ in range(2)]
        self.curve_line, = self.ax.plot([], [], color="#e0e0f0", lw=2.0)
        self.markers = self.ax.scatter([], [], s=90, zorder=5)
        self.preview, = self.ax.plot([], [], "o", mfc="none", mec="#4a9eff", alpha=0.6, zorder=4)

        self.mpl_connect("button_press_event", self._on_press)
        self.mpl_connect("button_release_event", self._on_release)
        self.mpl_connect("motion_notify_event", self._on_motion)
        self.mpl_connect("scroll_event", self._on_scroll)
        self.mpl_connect("axes_leave_event", self._on_leave)
        self.mpl_connect("resize_event", self._on_resize)
        self._apply_size()

    # Geometry -----------------------------------------------------------
    def _apply_size(self) -> None:
        width = max(int(self.figure.bbox.width), 1)
        height = max(float(self.figure.bbox.height), 1.0)
        self.panel.resize(width, height)
        self.ax.set_xlim(0, width)
        self.ax.set_ylim(height, 0)
        for artist in self._grid_artists:
            artist.remove()
        self._grid_artists = []
        for freq in (100.0, 1000.0, 10000.0):
            self._grid_artists.append(self.ax.axvline(freq_to_x(freq, width), color="#2a2a30", lw=1))
        for db in (-12.0, 0.0, 12.0):
            colour = "#3a3a44" if db == 0 else "#2a2a30"
            self._grid_artists.append(self.ax.axhline(gain_to_y(db, height), color=colour, lw=1))
        self.refresh()

    def _on_resize(self, event) -> None:
        self._apply_size()

    # Drawing ------------------------------------------------------------
    def refresh(self) -> None:
        self.refresh_spectrum(draw=False)
        self.curve_line.set_data(*curve_xy(self.panel.curve()))

        for line in self.band_lines:
            line.set_data([], [])
        for line, (position, xs, ys) in zip(self.band_lines, self.panel.band_curves()):
            band = self.panel.registry.get(position)
            line.set_data(xs, ys)
            line.set_color(SHAPE_COLOURS[band.shape])
            line.set_alpha(0.5)

        markers = self.panel.markers()
        if markers:
            self.markers.set_offsets(np.array([[m.x, m.y] for m in markers]))
            self.markers.set_facecolors([SHAPE_COLOURS[m.band.shape] if m.band.enabled else "#404048" for m in markers])
            self.markers.set_edgecolors(["white" if (m.selected or m.hovered) else "none" for m in markers])
        else:
            self.markers.set_offsets(np.zeros((0, 2)))

        preview = self.panel.state.preview_position
        if preview is None:
            self.preview.set_data([], [])
        else:
            self.preview.set_data([preview[0]], [preview[1]])
        self.draw_idle()

    def refresh_spectrum(self, draw: bool = True) -> None:
        width, height = self.panel.size
        spline = self.panel.spectrum_path()
        self.spectrum_fill.set_path(spline_fill_path(spline, width, height))
        self.spectrum_line.set_path(spline_to_path(spline))
        peaks = self.panel.peak_points()
        if peaks:
            self.peak_line.set_data(*zip(*peaks))
        else:
            self.peak_line.set_data([], [])
        if draw:
            self.draw_idle()

    # Mouse --------------------------------------------------------------
    def _on_press(self, event) -> None:
        if event.inaxes is not self.ax or event.xdata is None:
            return
        controller = self.panel.controller
        x, y = event.xdata, event.ydata
        if event.button == 3:
            hit = controller.hit_test(x, y, include_disabled=True)
            if hit is not None:
                self.panel.registry.remove_band(hit)
        elif event.dblclick:
            if not self._press_added:
                controller.double_tap(x, y)
            self._press_added = False
        else:
            count = len(self.panel.registry)
            controller.tap(x, y)
            self._press_added = len(self.panel.registry) > count
            controller.drag_start(x, y)
        self.refresh()

    def _on_release(self, event) -> None:
        self.panel.controller.drag_end()
        self.refresh()

    def _on_motion(self, event) -> None:
        if event.inaxes is not self.ax or event.xdata is None:
            return
        controller = self.panel.controller
        if controller.state.dragging:
            controller.drag_update(event.xdata, event.ydata)
        else:
            controller.hover(event.xdata, event.ydata)
        self.refresh()

    def _on_scroll(self, event) -> None:
        fine = event.key is not None and "shift" in event.key
        self.panel.controller.scroll(-event.step, fine=fine)
        self.refresh()

    def _on_leave(self, event) -> None:
        self.panel.controller.leave()
        self.refresh()


class EqualiserWindow(QtWidgets.QMainWindow):
    band_columns = ["Frequency (Hz)", "Gain (dB)", "Q", "Shape", "On"]

    def __init__(self, settings: Optional[EditorConfig] = None) -> None:
        super().__init__()
        self.setWindowTitle("eqscope - Parametric EQ[*]")
        self.resize(1100, 760)
        self.settings = settings or EditorConfig.from_env()
        self.engine = InMemoryEngine()
        self.synthetic = SyntheticSpectrum()
        self.stream = None
        self._updating_table = False

        self.panel = EqPanel(
            width=800,
            height=300,
            spectrum_source=self._read_spectrum,
            scheduler=QtScheduler(self),
            settings=self.settings,
            on_settings_changed=self._on_settings_changed,
            on_spectrum=self._on_spectrum,
        )
        self.panel.attach_engine(self.engine)

        central = QtWidgets.QWidget()
        self.setCentralWidget(central)
        layout = QtWidgets.QVBoxLayout(central)

        layout.addWidget(self._build_analyzer_group())
        self.curve_canvas = EQGraphCanvas(self.panel)
        layout.addWidget(self.curve_canvas, 3)
        layout.addWidget(self._build_band_group(), 2)
        self._rebuild_table()
        layout.addWidget(self._build_instructions_box())

        self.status_bar = QtWidgets.QStatusBar()
        self.setStatusBar(self.status_bar)

        self.device_refresh()
        self.panel.start()

        self.status_timer = QtCore.QTimer(self)
        self.status_timer.timeout.connect(self._poll_backend_status)
        self.status_timer.start(500)

    # UI builders -------------------------------------------------------
    def _build_analyzer_group(self) -> QtWidgets.QGroupBox:
        group = QtWidgets.QGroupBox("Analyzer")
        layout = QtWidgets.QHBoxLayout(group)

        self.analyzer_toggle = QtWidgets.QCheckBox("Show spectrum")
        self.analyzer_toggle.setChecked(True)
        self.analyzer_toggle.toggled.connect(self._toggle_analyzer)
        layout.addWidget(self.analyzer_toggle)

        self.input_combo = QtWidgets.QComboBox()
        layout.addWidget(QtWidgets.QLabel("Input"))
        layout.addWidget(self.input_combo, 1)
        self.refresh_button = QtWidgets.QPushButton("Refresh")
        self.refresh_button.clicked.connect(self.device_refresh)
        layout.addWidget(self.refresh_button)
        self.start_button = QtWidgets.QPushButton("Listen")
        self.start_button.clicked.connect(self.start_audio)
        self.stop_button = QtWidgets.QPushButton("Stop")
        self.stop_button.clicked.connect(self.stop_audio)
        layout.addWidget(self.start_button)
        layout.addWidget(self.stop_button)
        self.meter_label = QtWidgets.QLabel("In -120.0 / Out -120.0 dBFS")
        layout.addWidget(self.meter_label)
        return group

    def _build_band_group(self) -> QtWidgets.QGroupBox:
        group = QtWidgets.QGroupBox("Parametric EQ Bands")
        layout = QtWidgets.QVBoxLayout(group)

        self.band_table = QtWidgets.QTableWidget(0, len(self.band_columns))
        self.band_table.setHorizontalHeaderLabels(self.band_columns)
        self.band_table.horizontalHeader().setStretchLastSection(True)
        self.band_table.verticalHeader().setVisible(False)
        self.band_table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectionBehavior.SelectRows)
        self.band_table.itemChanged.connect(self._on_band_item_changed)
        self.band_table.itemSelectionChanged.connect(self._on_table_selection)
        layout.addWidget(self.band_table)

        self.preamp_slider = QtWidgets.QSlider(QtCore.Qt.Orientation.Horizontal)
        self.preamp_slider.setRange(-240, 240)
        self.preamp_slider.setSingleStep(1)
        self.preamp_slider.setPageStep(5)
        self.preamp_slider.valueChanged.connect(self._on_preamp_changed)
        self.preamp_value = QtWidgets.QLabel("+0.0 dB")
        self.auto_gain_box = QtWidgets.QCheckBox("Auto-Gain")
        self.auto_gain_box.toggled.connect(self.panel.registry.set_auto_gain)
        preamp_row = QtWidgets.QHBoxLayout()
        preamp_row.addWidget(QtWidgets.QLabel("Output Gain"))
        preamp_row.addWidget(self.preamp_slider, 1)
        preamp_row.addWidget(self.preamp_value)
        preamp_row.addWidget(self.auto_gain_box)
        layout.addLayout(preamp_row)

        button_row = QtWidgets.QHBoxLayout()
        self.shape_combo = QtWidgets.QComboBox()
        for shape in FilterShape:
            self.shape_combo.addItem(shape.label, int(shape))
        self.shape_combo.currentIndexChanged.connect(self._on_shape_changed)
        self.placement_combo = QtWidgets.QComboBox()
        for placement in Placement:
            self.placement_combo.addItem(placement.name.title(), int(placement))
        self.placement_combo.currentIndexChanged.connect(self._on_placement_changed)
        self.add_band_button = QtWidgets.QPushButton("Add Band")
        self.add_band_button.clicked.connect(self.add_band)
        self.remove_band_button = QtWidgets.QPushButton("Remove Selected")
        self.remove_band_button.clicked.connect(self.remove_selected_band)
        self.solo_button = QtWidgets.QPushButton("Solo")
        self.solo_button.clicked.connect(self.toggle_solo)
        self.reset_button = QtWidgets.QPushButton("Reset EQ")
        self.reset_button.clicked.connect(self.reset_eq)
        self.a_button = QtWidgets.QPushButton("A")
        self.a_button.clicked.connect(lambda: self._ab_clicked("A"))
        self.b_button = QtWidgets.QPushButton("B")
        self.b_button.clicked.connect(lambda: self._ab_clicked("B"))
        button_row.addWidget(QtWidgets.QLabel("New band"))
        button_row.addWidget(self.shape_combo)
        button_row.addWidget(self.placement_combo)
        button_row.addWidget(self.add_band_button)
        button_row.addWidget(self.remove_band_button)
        button_row.addWidget(self.solo_button)
        button_row.addStretch(1)
        button_row.addWidget(self.a_button)
        button_row.addWidget(self.b_button)
        button_row.addWidget(self.reset_button)
        layout.addLayout(button_row)

        self.status_log = QtWidgets.QPlainTextEdit()
        self.status_log.setReadOnly(True)
        self.status_log.setMaximumBlockCount(200)
        self.status_log.setMaximumHeight(80)
        layout.addWidget(self.status_log)
        return group

    def _build_instructions_box(self) -> QtWidgets.QGroupBox:
        group = QtWidgets.QGroupBox("Mouse Controls")
        layout = QtWidgets.QVBoxLayout(group)
        text = QtWidgets.QPlainTextEdit()
        text.setPlainText(INSTRUCTIONS)
        text.setReadOnly(True)
        text.setMaximumHeight(90)
        layout.addWidget(text)
        return group

    # Analyzer input ------------------------------------------------------
    def _read_spectrum(self):
        if self.stream is not None and self.stream.running:
            return self.stream.read()
        return self.synthetic.read()

    def _ensure_stream(self) -> bool:
        if self.stream is not None:
            return True
        try:
            from eqscope.audio.stream import SpectrumStream
        except (RuntimeError, OSError) as exc:
            self.status_bar.showMessage(f"Live input unavailable: {exc}", 5000)
            return False
        self.stream = SpectrumStream()
        return True

    def device_refresh(self) -> None:
        self.input_combo.clear()
        if not self._ensure_stream():
            return
        try:
            devices = self.stream.list_devices()
        except Exception as exc:
            self.status_bar.showMessage(f"Audio device query failed: {exc}", 5000)
            return
        for dev in devices:
            self.input_combo.addItem(f"{dev.index}: {dev.name}", dev)

    def start_audio(self) -> None:
        dev = self.input_combo.currentData()
        if dev is None or not self._ensure_stream():
            self.status_bar.showMessage("Select an input device", 4000)
            return
        self.stream.configure(dev.default_samplerate, 2048, dev.index, min(2, dev.max_input_channels))
        try:
            self.stream.start()
        except Exception as exc:
            self.status_bar.showMessage(f"Failed to start input: {exc}", 5000)
            return
        self.panel.analyzer.smoother.reset()
        self.status_bar.showMessage("Listening", 2000)

    def stop_audio(self) -> None:
        if self.stream is not None:
            self.stream.stop()
        self.status_bar.showMessage("Input stopped, showing test spectrum", 2000)

    def _toggle_analyzer(self, checked: bool) -> None:
        self.panel.analyzer.set_enabled(checked)
        self.curve_canvas.refresh_spectrum()

    def _on_spectrum(self) -> None:
        meter = self.panel.meter()
        self.meter_label.setText(f"In {meter.input_dbfs:.1f} / Out {meter.output_dbfs:.1f} dBFS")
        self.curve_canvas.refresh_spectrum()

    # Band management ---------------------------------------------------
    def add_band(self) -> None:
        self.panel.registry.add_band(1000.0, FilterShape(self.shape_combo.currentData()))
        self.curve_canvas.refresh()

    def remove_selected_band(self) -> None:
        position = self.panel.registry.selected_index
        if position is not None:
            self.panel.registry.remove_band(position)
            self.curve_canvas.refresh()

    def toggle_solo(self) -> None:
        registry = self.panel.registry
        position = registry.selected_index
        if position is None:
            return
        registry.set_solo(position, solo=position != registry.soloed_index)
        self.curve_canvas.refresh()

    def reset_eq(self) -> None:
        self.panel.registry.reset_all()
        self.preamp_slider.blockSignals(True)
        self.preamp_slider.setValue(0)
        self.preamp_slider.blockSignals(False)
        self.preamp_value.setText("+0.0 dB")
        self.curve_canvas.refresh()

    def _ab_clicked(self, name: str) -> None:
        registry = self.panel.registry
        modifiers = QtWidgets.QApplication.keyboardModifiers()
        if modifiers & QtCore.Qt.KeyboardModifier.ShiftModifier or not registry.has_state(name):
            registry.store_state(name)
            self.status_bar.showMessage(f"Stored state {name}", 2000)
            return
        registry.recall_state(name)
        self.status_bar.showMessage(f"Recalled state {name}", 2000)
        self.curve_canvas.refresh()

    def _on_shape_changed(self, _index: int) -> None:
        self.panel.controller.set_preview_shape(FilterShape(self.shape_combo.currentData()))

    def _on_placement_changed(self, _index: int) -> None:
        self.panel.registry.global_placement = Placement(self.placement_combo.currentData())

    def _on_settings_changed(self) -> None:
        if hasattr(self, "band_table"):
            self._rebuild_table()
        self.setWindowModified(True)

    def _rebuild_table(self) -> None:
        self._updating_table = True
        bands = self.panel.registry.bands
        self.band_table.setRowCount(len(bands))
        for row, band in enumerate(bands):
            for col, value in enumerate([band.freq, band.gain, band.q]):
                item = QtWidgets.QTableWidgetItem(f"{value:.3f}")
                item.setData(QtCore.Qt.ItemDataRole.UserRole, value)
                self.band_table.setItem(row, col, item)
            shape_item = QtWidgets.QTableWidgetItem(band.shape.label)
            shape_item.setFlags(shape_item.flags() & ~QtCore.Qt.ItemFlag.ItemIsEditable)
            self.band_table.setItem(row, 3, shape_item)
            on_item = QtWidgets.QTableWidgetItem()
            on_item.setFlags(on_item.flags() | QtCore.Qt.ItemFlag.ItemIsUserCheckable)
            on_item.setCheckState(QtCore.Qt.CheckState.Checked if band.enabled else QtCore.Qt.CheckState.Unchecked)
            self.band_table.setItem(row, 4, on_item)
        selected = self.panel.registry.selected_index
        if selected is not None:
            self.band_table.selectRow(selected)
        self._updating_table = False

    def _on_table_selection(self) -> None:
        if self._updating_table:
            return
        rows = {idx.row() for idx in self.band_table.selectedIndexes()}
        if len(rows) == 1:
            self.panel.registry.select(rows.pop())
            self.curve_canvas.refresh()

    def _on_band_item_changed(self, item: QtWidgets.QTableWidgetItem) -> None:
        if self._updating_table:
            return
        row, col = item.row(), item.column()
        if col == 4:
            self.panel.registry.update_band(row, enabled=item.checkState() == QtCore.Qt.CheckState.Checked)
        elif col in (0, 1, 2):
            try:
                value = float(item.text())
            except ValueError:
                value = float(item.data(QtCore.Qt.ItemDataRole.UserRole) or 0.0)
            name = ("freq", "gain", "q")[col]
            self.panel.registry.update_band(row, **{name: value})
        self.curve_canvas.refresh()

    def _on_preamp_changed(self, slider_value: int) -> None:
        gain_db = slider_value / 10.0
        self.preamp_value.setText(f"{gain_db:+.1f} dB")
        self.panel.registry.set_output_gain(gain_db)

    # Lifecycle -----------------------------------------------------------
    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # noqa: N802
        self.panel.dispose()
        if self.stream is not None:
            self.stream.close()
        return super().closeEvent(event)

    # Telemetry ---------------------------------------------------------
    def _poll_backend_status(self) -> None:
        messages = self.panel.link.poll_status()
        if self.stream is not None:
            messages.extend(self.stream.poll_status())
        for message in messages:
            self.status_log.appendPlainText(message)


def run() -> None:
    import sys

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    app = QtWidgets.QApplication(sys.argv)
    window = EqualiserWindow()
    window.show()
    sys.exit(app.exec())
