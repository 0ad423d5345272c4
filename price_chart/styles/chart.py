# price_chart/styles/chart.py
"""
Styles for the price chart: drawing palette and widget stylesheet
"""

from .base_styles import BaseStyles, px

class ChartStyles:

    # Chart color scheme
    CHART_BACKGROUND = "#1a1a1a"
    CHART_GRID = "#333333"
    CHART_TEXT = "#cccccc"
    GRID_OPACITY = 0.5

    # Price series
    LINE_COLOR = "#3b82f6"
    LINE_WIDTH = 2.0
    AREA_OPACITY = 0.1

    # Candlestick colors
    CANDLE_BULL = BaseStyles.POSITIVE
    CANDLE_BEAR = BaseStyles.NEGATIVE
    CANDLE_WIDTH_RATIO = 0.8

    # Volume bars
    VOLUME_COLOR = "#6b7280"
    VOLUME_OPACITY = 0.7
    VOLUME_GAP = 1.0

    # Indicator colors; dash patterns are (dash, gap) in pixels
    INDICATOR_STYLES = {
        'sma20': {'color': "#f59e0b", 'dash': (2, 2)},
        'sma50': {'color': "#8b5cf6", 'dash': (5, 5)},
        'ema20': {'color': "#06b6d4", 'dash': None},
        'bollinger': {'color': "#ef4444", 'dash': None, 'opacity': 0.3},
        'rsi': {'color': "#f59e0b", 'dash': None},
    }

    # Crosshair and tooltip
    CROSSHAIR_COLOR = "#6b7280"
    CROSSHAIR_DASH = (4, 4)
    CROSSHAIR_OPACITY = 0.7
    TOOLTIP_BACKGROUND = "#000000"
    TOOLTIP_OPACITY = 0.8
    TOOLTIP_TEXT = "#ffffff"
    TOOLTIP_WIDTH = 120
    TOOLTIP_HEIGHT = 50
    TOOLTIP_OFFSET = 10

    # Text sizes in points
    AXIS_FONT_SIZE = 10
    TOOLTIP_FONT_SIZE = 10

    @staticmethod
    def get_stylesheet():
        return f"""
        /* Chart container */
        QWidget#chart_container {{
            background-color: {BaseStyles.PANEL_BG};
            border: 1px solid {BaseStyles.EDGE};
            border-radius: 5px;
            padding: 5px;
        }}

        /* Chart header */
        QLabel#chart_symbol {{
            font-size: {px(BaseStyles.TEXT_TITLE)};
            font-weight: bold;
        }}

        QLabel#chart_price {{
            font-size: {px(BaseStyles.TEXT_LARGE)};
            font-weight: bold;
        }}

        QLabel#chart_live {{
            font-size: {px(BaseStyles.TEXT_SMALL)};
            color: {BaseStyles.POSITIVE};
        }}

        QLabel#chart_offline {{
            font-size: {px(BaseStyles.TEXT_SMALL)};
            color: {BaseStyles.NEUTRAL};
        }}

        /* Chart controls */
        QWidget#chart_controls {{
            background-color: {BaseStyles.TOOLBAR_BG};
            padding: 5px;
            border-bottom: 1px solid {BaseStyles.EDGE};
        }}

        QPushButton#period_button {{
            padding: 4px 8px;
            margin: 0 1px;
            font-size: {px(BaseStyles.TEXT_SMALL)};
        }}

        /* Indicator toggles */
        QCheckBox#indicator_toggle {{
            padding: 5px;
            margin: 0 5px;
        }}

        QCheckBox#indicator_toggle::indicator {{
            width: 16px;
            height: 16px;
        }}

        QCheckBox#indicator_toggle::indicator:checked {{
            background-color: {BaseStyles.SELECTED};
            border: 2px solid {BaseStyles.SELECTED};
        }}

        QCheckBox#indicator_toggle::indicator:unchecked {{
            background-color: {BaseStyles.PANEL_BG};
            border: 2px solid {BaseStyles.EDGE};
        }}

        /* Footer */
        QLabel#chart_footer {{
            font-size: {px(BaseStyles.TEXT_SMALL)};
            color: {BaseStyles.TEXT_MUTED};
            padding: 4px;
        }}
        """
