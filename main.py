#!/usr/bin/env python3
"""
Main entry point: serve the traffic history and keep it synced.
"""

import logging

from git_traffic_history.config import load_configuration
from git_traffic_history.server import run_server

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    config = load_configuration()
    logging.getLogger().setLevel(config.log_level)
    run_server(config)
