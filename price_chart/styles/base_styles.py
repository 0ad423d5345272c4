# price_chart/styles/base_styles.py
"""
Dark palette shared by the chart window and its controls
"""


def px(size: int) -> str:
    return f"{size}px"


class BaseStyles:
    # Surfaces, darkest first
    WINDOW_BG = "#1e1e1e"
    PANEL_BG = "#2b2b2b"
    TOOLBAR_BG = "#323232"
    EDGE = "#444"

    TEXT = "#ffffff"
    TEXT_DIM = "#cccccc"
    TEXT_MUTED = "#888888"

    # Selected period / checked toggle
    SELECTED = "#0d7377"
    HOVER = "#14a085"
    PRESSED = "#0a5d61"

    # Price direction
    POSITIVE = "#10b981"
    NEGATIVE = "#ef4444"
    NEUTRAL = "#888888"

    FONT_FAMILY = "Arial"
    TEXT_SMALL = 11
    TEXT_NORMAL = 13
    TEXT_LARGE = 16
    TEXT_TITLE = 20

    RADIUS = 4

    @staticmethod
    def get_base_stylesheet():
        s = BaseStyles
        return f"""
        QWidget {{
            background-color: {s.WINDOW_BG};
            color: {s.TEXT};
            font-family: {s.FONT_FAMILY};
            font-size: {px(s.TEXT_NORMAL)};
        }}

        QPushButton {{
            background-color: {s.TOOLBAR_BG};
            color: {s.TEXT_DIM};
            border: 1px solid {s.EDGE};
            border-radius: {px(s.RADIUS)};
            padding: 4px 10px;
        }}
        QPushButton:hover {{ background-color: {s.HOVER}; }}
        QPushButton:pressed {{ background-color: {s.PRESSED}; }}
        QPushButton:checked {{ background-color: {s.SELECTED}; color: {s.TEXT}; }}

        QComboBox, QCheckBox {{
            color: {s.TEXT};
        }}
        QComboBox {{
            background-color: {s.PANEL_BG};
            border: 1px solid {s.EDGE};
            border-radius: {px(s.RADIUS)};
            padding: 4px 8px;
        }}
        """
