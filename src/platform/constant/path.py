from pathlib import Path


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Log directory
LOG_DIR = BASE_DIR / 'logs'

# Seat state directory (file backend)
SEAT_STATE_DIR = BASE_DIR / 'seat_state'
