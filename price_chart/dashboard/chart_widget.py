"""
Chart Widget Module - Interactive price chart painted from render primitives
"""

import logging
from typing import Optional, List

import pyqtgraph as pg
from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel,
                             QPushButton, QComboBox, QCheckBox, QButtonGroup)
from PyQt6.QtCore import pyqtSignal, pyqtSlot, Qt, QTimer, QThread, QRectF, QPointF
from PyQt6.QtGui import QFont, QPainter, QPicture, QPolygonF

from ..chart.orchestrator import ChartOrchestrator, RenderResult
from ..config import ChartSettings, CHART_TYPES, INTERVALS, PERIODS, get_config
from ..data.models import INDICATOR_SPECS, SeriesKey
from ..exceptions import DataFetchError
from ..rendering.primitives import Line, Polygon, Polyline, Rect, Text
from ..styles import ChartStyles, BaseStyles

# Configure logging
logger = logging.getLogger(__name__)

# Configure PyQtGraph
pg.setConfigOptions(antialias=True)


class FetchWorker(QThread):
    """Loads one series (and its quote) off the GUI thread"""

    data_ready = pyqtSignal(object, object, object)  # SeriesKey, List[Bar], Optional[Quote]
    error = pyqtSignal(object, object)  # SeriesKey, Exception

    def __init__(self, provider, key: SeriesKey):
        super().__init__()
        self.provider = provider
        self.key = key

    def run(self):
        key = self.key
        try:
            bars = self.provider.get_historical_bars(key.symbol, key.period, key.interval)
        except DataFetchError as e:
            self.error.emit(key, e)
            return
        except Exception as e:
            logger.error(f"Unexpected fetch failure for {key.symbol}: {e}", exc_info=True)
            self.error.emit(key, DataFetchError(f"Failed to load chart data: {e}", symbol=key.symbol))
            return

        quote = None
        try:
            quote = self.provider.get_quote(key.symbol)
        except DataFetchError as e:
            logger.warning(f"Quote unavailable for {key.symbol}: {e}")
        except Exception as e:
            logger.error(f"Unexpected quote failure for {key.symbol}: {e}", exc_info=True)

        self.data_ready.emit(key, bars, quote)


def _color(value: str, opacity: float = 1.0):
    color = pg.mkColor(value)
    color.setAlphaF(max(0.0, min(1.0, opacity)))
    return color


def _pen(value: str, width: float = 1.0, dash=None, opacity: float = 1.0):
    if dash:
        return pg.mkPen(_color(value, opacity), width=width, dash=list(dash))
    return pg.mkPen(_color(value, opacity), width=width)


class PrimitiveItem(pg.GraphicsObject):
    """Paints one RenderResult; scene units are surface pixels"""

    def __init__(self):
        pg.GraphicsObject.__init__(self)
        self.picture = None
        self.size = (0.0, 0.0)

    def set_result(self, result: RenderResult, width: float, height: float):
        self.prepareGeometryChange()
        self.size = (width, height)
        self.generatePicture(result)
        self.update()

    def generatePicture(self, result: RenderResult):
        """Generate the picture for painting"""
        self.picture = QPicture()
        p = QPainter(self.picture)

        if result.is_placeholder or not result.layers:
            if result.message:
                self._draw_message(p, result.message)
        else:
            for layer in result.layers:
                for primitive in layer.primitives:
                    self._draw(p, primitive)

        p.end()

    def _draw_message(self, p: QPainter, message: str):
        width, height = self.size
        p.setPen(pg.mkPen(ChartStyles.CHART_TEXT))
        p.setFont(QFont(BaseStyles.FONT_FAMILY, 12))
        p.drawText(QRectF(0, 0, width, height), Qt.AlignmentFlag.AlignCenter, message)

    def _draw(self, p: QPainter, primitive):
        if isinstance(primitive, Polyline):
            p.setPen(_pen(primitive.color, primitive.width, primitive.dash, primitive.opacity))
            p.setBrush(Qt.BrushStyle.NoBrush)
            p.drawPolyline(QPolygonF([QPointF(x, y) for x, y in primitive.points]))

        elif isinstance(primitive, Polygon):
            p.setPen(Qt.PenStyle.NoPen)
            p.setBrush(pg.mkBrush(_color(primitive.fill_color, primitive.opacity)))
            p.drawPolygon(QPolygonF([QPointF(x, y) for x, y in primitive.points]))

        elif isinstance(primitive, Rect):
            if primitive.stroke_color:
                p.setPen(_pen(primitive.stroke_color, opacity=primitive.opacity))
            else:
                p.setPen(Qt.PenStyle.NoPen)
            p.setBrush(pg.mkBrush(_color(primitive.fill_color, primitive.opacity)))
            p.drawRect(QRectF(primitive.x, primitive.y, primitive.width, primitive.height))

        elif isinstance(primitive, Line):
            p.setPen(_pen(primitive.color, primitive.width, primitive.dash, primitive.opacity))
            p.drawLine(QPointF(primitive.x1, primitive.y1), QPointF(primitive.x2, primitive.y2))

        elif isinstance(primitive, Text):
            self._draw_text(p, primitive)

    def _draw_text(self, p: QPainter, text: Text):
        box_width, box_height = 200.0, text.size * 2.0

        if text.anchor == 'right':
            left, h_flag = text.x - box_width, Qt.AlignmentFlag.AlignRight
        elif text.anchor == 'center':
            left, h_flag = text.x - box_width / 2, Qt.AlignmentFlag.AlignHCenter
        else:
            left, h_flag = text.x, Qt.AlignmentFlag.AlignLeft

        if text.baseline == 'top':
            top, v_flag = text.y, Qt.AlignmentFlag.AlignTop
        elif text.baseline == 'bottom':
            top, v_flag = text.y - box_height, Qt.AlignmentFlag.AlignBottom
        else:
            top, v_flag = text.y - box_height / 2, Qt.AlignmentFlag.AlignVCenter

        p.setPen(pg.mkPen(text.color))
        p.setFont(QFont(BaseStyles.FONT_FAMILY, int(text.size)))
        p.drawText(QRectF(left, top, box_width, box_height), h_flag | v_flag, text.text)

    def paint(self, p, *args):
        if self.picture:
            p.drawPicture(0, 0, self.picture)

    def boundingRect(self):
        width, height = self.size
        return QRectF(0, 0, width, height)


class ChartSurface(pg.GraphicsView):
    """Drawing surface mapping one scene unit to one pixel"""

    pointer_moved = pyqtSignal(float, float)
    pointer_left = pyqtSignal()
    resized = pyqtSignal(int, int)

    def __init__(self, parent=None):
        super().__init__(parent, background=ChartStyles.CHART_BACKGROUND)
        self.enableMouse(False)
        self.setMouseTracking(True)

        self.item = PrimitiveItem()
        self.addItem(self.item)

    def mouseMoveEvent(self, ev):
        pos = ev.position()
        self.pointer_moved.emit(pos.x(), pos.y())
        super().mouseMoveEvent(ev)

    def leaveEvent(self, ev):
        self.pointer_left.emit()
        super().leaveEvent(ev)

    def resizeEvent(self, ev):
        super().resizeEvent(ev)
        width, height = self.width(), self.height()
        self.setRange(QRectF(0, 0, width, height), padding=0)
        self.resized.emit(width, height)


class PriceChartWidget(QWidget):
    """Widget hosting one interactive price chart"""

    # Signals
    fullscreen_toggled = pyqtSignal(bool)

    def __init__(self, symbol: str, provider, live_client=None,
                 period: Optional[str] = None, interval: Optional[str] = None,
                 show_volume: bool = True, show_indicators: bool = True,
                 real_time: bool = True, settings: Optional[ChartSettings] = None,
                 parent=None):
        super().__init__(parent)

        self.settings = settings or get_config()
        self.provider = provider
        self.live_client = live_client
        self._workers: List[FetchWorker] = []

        self.orchestrator = ChartOrchestrator(
            symbol, provider,
            period=period,
            interval=interval,
            show_volume=show_volume,
            show_indicators=show_indicators,
            real_time=real_time and live_client is not None,
            dispatcher=self._dispatch_fetch,
            fullscreen_handler=self._apply_fullscreen,
            settings=self.settings
        )

        self.init_ui()
        self.apply_styles()
        self._unsubscribe = self.orchestrator.subscribe(self._on_render)

        # Coalesced ticks are merged on a short cadence
        self.tick_timer = QTimer()
        self.tick_timer.timeout.connect(self.orchestrator.flush_ticks)
        self.tick_timer.start(self.settings.tick_flush_ms)

        if self.live_client is not None and self.orchestrator.config.real_time:
            self.live_client.tick_received.connect(self.orchestrator.on_tick)
            self.live_client.connection_status.connect(self.orchestrator.set_connection_status)
            self.live_client.watch(self.orchestrator.symbol)

    def init_ui(self):
        """Initialize the UI"""
        self.setObjectName("chart_container")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        layout.addWidget(self.create_header())
        layout.addWidget(self.create_controls())

        self.surface = ChartSurface()
        self.surface.pointer_moved.connect(self.orchestrator.pointer_move)
        self.surface.pointer_left.connect(self.orchestrator.pointer_leave)
        self.surface.resized.connect(self.orchestrator.resize)
        layout.addWidget(self.surface, 1)  # Give it stretch factor

        self.footer_label = QLabel("")
        self.footer_label.setObjectName("chart_footer")
        layout.addWidget(self.footer_label)

    def create_header(self):
        header = QWidget()
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(10, 5, 10, 5)

        self.symbol_label = QLabel(self.orchestrator.symbol)
        self.symbol_label.setObjectName("chart_symbol")
        header_layout.addWidget(self.symbol_label)

        self.price_label = QLabel("--")
        self.price_label.setObjectName("chart_price")
        header_layout.addWidget(self.price_label)

        self.change_label = QLabel("")
        header_layout.addWidget(self.change_label)

        self.live_label = QLabel("")
        self.live_label.setObjectName("chart_offline")
        header_layout.addWidget(self.live_label)

        header_layout.addStretch()

        self.fullscreen_btn = QPushButton("Fullscreen")
        self.fullscreen_btn.clicked.connect(self.orchestrator.toggle_fullscreen)
        header_layout.addWidget(self.fullscreen_btn)

        return header

    def create_controls(self):
        """Create control widgets"""
        controls_widget = QWidget()
        controls_widget.setObjectName("chart_controls")
        controls_layout = QHBoxLayout(controls_widget)
        controls_layout.setContentsMargins(10, 5, 10, 5)

        # Period buttons
        self.period_group = QButtonGroup(self)
        self.period_group.setExclusive(True)
        self.period_buttons = {}
        for period in PERIODS:
            btn = QPushButton(period)
            btn.setObjectName("period_button")
            btn.setCheckable(True)
            btn.setChecked(period == self.orchestrator.config.period)
            btn.clicked.connect(lambda checked, p=period: self.orchestrator.set_period(p))
            self.period_group.addButton(btn)
            self.period_buttons[period] = btn
            controls_layout.addWidget(btn)

        controls_layout.addSpacing(10)

        # Interval selector
        self.interval_combo = QComboBox()
        self.interval_combo.addItems(INTERVALS)
        self.interval_combo.setCurrentText(self.orchestrator.config.interval)
        self.interval_combo.currentTextChanged.connect(self.orchestrator.set_interval)
        controls_layout.addWidget(QLabel("Interval:"))
        controls_layout.addWidget(self.interval_combo)

        # Chart type selector
        self.chart_type_combo = QComboBox()
        self.chart_type_combo.addItems(CHART_TYPES)
        self.chart_type_combo.setCurrentText(self.orchestrator.config.chart_type)
        self.chart_type_combo.currentTextChanged.connect(self.orchestrator.set_chart_type)
        controls_layout.addWidget(self.chart_type_combo)

        controls_layout.addSpacing(20)

        # Indicator toggles
        self.indicator_checkboxes = {}
        if self.orchestrator.config.show_indicators:
            for name, spec in INDICATOR_SPECS.items():
                check = QCheckBox(spec.label)
                check.setObjectName("indicator_toggle")
                check.setStyleSheet(f"color: {ChartStyles.INDICATOR_STYLES[name]['color']};")
                check.toggled.connect(lambda checked, n=name: self.orchestrator.toggle_indicator(n, checked))
                self.indicator_checkboxes[name] = check
                controls_layout.addWidget(check)

        self.volume_check = QCheckBox("Volume")
        self.volume_check.setChecked(self.orchestrator.config.show_volume)
        self.volume_check.toggled.connect(self.orchestrator.set_show_volume)
        controls_layout.addWidget(self.volume_check)

        controls_layout.addStretch()

        return controls_widget

    def apply_styles(self):
        """Apply styles to the widget"""
        self.setStyleSheet(BaseStyles.get_base_stylesheet() + ChartStyles.get_stylesheet())

    def start(self):
        """Load the initial series and connect the live feed"""
        self.orchestrator.request_series()
        if self.live_client is not None and self.orchestrator.config.real_time:
            self.live_client.start()

    def _dispatch_fetch(self, key: SeriesKey):
        worker = FetchWorker(self.provider, key)
        worker.data_ready.connect(self._on_data_ready)
        worker.error.connect(self.orchestrator.deliver_error)
        worker.finished.connect(lambda w=worker: self._workers.remove(w))
        self._workers.append(worker)
        worker.start()

    @pyqtSlot(object, object, object)
    def _on_data_ready(self, key, bars, quote):
        if self.orchestrator.deliver_series(key, bars) and quote is not None:
            self.orchestrator.deliver_quote(key.symbol, quote)

    def set_symbol(self, symbol: str):
        old_symbol = self.orchestrator.symbol
        self.orchestrator.set_symbol(symbol)
        self.symbol_label.setText(self.orchestrator.symbol)
        if self.live_client is not None and self.orchestrator.symbol != old_symbol:
            self.live_client.watch(self.orchestrator.symbol)

    def _on_render(self, result: RenderResult):
        header = result.header
        self.price_label.setText(header.get('price_text', '--'))
        self.change_label.setText(header.get('change_text', ''))
        self.change_label.setStyleSheet(f"color: {header.get('change_color', BaseStyles.NEUTRAL)};")
        self.live_label.setText(header.get('live_text', ''))
        self.live_label.setObjectName("chart_live" if header.get('live') else "chart_offline")
        self.live_label.style().unpolish(self.live_label)
        self.live_label.style().polish(self.live_label)

        self.footer_label.setText(result.footer.get('text', ''))

        # Period changes can switch the interval
        config = self.orchestrator.config
        if self.interval_combo.currentText() != config.interval:
            self.interval_combo.blockSignals(True)
            self.interval_combo.setCurrentText(config.interval)
            self.interval_combo.blockSignals(False)
        if not self.period_buttons[config.period].isChecked():
            self.period_buttons[config.period].setChecked(True)

        self.surface.item.set_result(result, self.orchestrator.width, self.orchestrator.height)

    def _apply_fullscreen(self, enabled: bool):
        window = self.window()
        if enabled:
            window.showFullScreen()
            self.fullscreen_btn.setText("Exit Fullscreen")
        else:
            window.showNormal()
            self.fullscreen_btn.setText("Fullscreen")
        self.fullscreen_toggled.emit(enabled)

    def keyPressEvent(self, event):
        if event.key() == Qt.Key.Key_Escape and self.orchestrator.is_fullscreen:
            self.orchestrator.toggle_fullscreen()
            return
        super().keyPressEvent(event)

    def closeEvent(self, event):
        self.tick_timer.stop()
        self._unsubscribe()
        if self.live_client is not None:
            self.live_client.stop()
        for worker in list(self._workers):
            worker.wait(2000)
        super().closeEvent(event)
