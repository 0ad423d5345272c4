#!/usr/bin/env python3
"""
Run Price Chart
Execute from root directory: python run_price_chart.py AAPL --period 5D
"""

import sys
import os
import logging
import argparse

# Add current directory to path so we can import price_chart
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from PyQt6.QtWidgets import QApplication, QMainWindow

from price_chart.config import PERIODS, INTERVALS, get_config, setup_logging
from price_chart.data.rest_client import HistoricalDataClient
from price_chart.data.websocket_client import LivePriceClient
from price_chart.dashboard.chart_widget import PriceChartWidget

logger = logging.getLogger("price_chart.run")


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Price Chart - Interactive OHLCV chart with live updates'
    )

    parser.add_argument(
        'symbol',
        help='Symbol to chart'
    )

    parser.add_argument(
        '--period',
        choices=PERIODS,
        default=None,
        help='Chart period (default: PRICE_CHART_PERIOD or 1D)'
    )

    parser.add_argument(
        '--interval',
        choices=INTERVALS,
        default=None,
        help='Bar interval (default: the period default)'
    )

    parser.add_argument(
        '--no-volume',
        action='store_true',
        help='Hide the volume band'
    )

    parser.add_argument(
        '--no-realtime',
        action='store_true',
        help='Do not connect to the live price feed'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args()


def main():
    """Main entry point"""
    args = parse_arguments()

    settings = get_config()
    package_logger = setup_logging(settings)

    # Set debug logging if requested
    if args.debug:
        package_logger.setLevel(logging.DEBUG)
        for handler in package_logger.handlers:
            handler.setLevel(logging.DEBUG)

    symbol = args.symbol.upper()

    logger.info("=" * 60)
    logger.info("PRICE CHART")
    logger.info("=" * 60)
    logger.info(f"Symbol: {symbol}")
    logger.info(f"Data server: {settings.api_url}")
    logger.info(f"Live feed: {'off' if args.no_realtime else settings.websocket_url}")
    logger.info("=" * 60)

    app = QApplication(sys.argv)

    provider = HistoricalDataClient(settings=settings)
    live_client = None if args.no_realtime else LivePriceClient(settings=settings)

    chart = PriceChartWidget(
        symbol,
        provider,
        live_client=live_client,
        period=args.period,
        interval=args.interval,
        show_volume=not args.no_volume,
        settings=settings
    )

    window = QMainWindow()
    window.setWindowTitle(f"{symbol} - Price Chart")
    window.setCentralWidget(chart)
    window.resize(settings.chart_width + 200, settings.chart_height + 200)
    window.show()

    chart.start()

    try:
        exit_code = app.exec()
    finally:
        provider.close()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
