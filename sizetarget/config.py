# config.py
"""
Configuration constants for the size-target compressor.
"""

# Quality search
SEARCH_ITERATIONS = 12
QUALITY_LOW = 0.05
QUALITY_HIGH = 0.95

# Emergency shrink loop
SHRINK_FACTOR = 0.82
MAX_SHRINK_ROUNDS = 4
MIN_DIMENSION = 200  # Per-dimension floor for shrink rounds and max width

# Request defaults
DEFAULT_MAX_DIMENSION = 1200
TARGET_PRESETS_KB = (20, 50, 100)
DEFAULT_TARGET_KB = 20
DEFAULT_FORMAT = "image/jpeg"
BYTES_PER_KB = 1024

# Supported input formats
SUPPORTED_IMAGE_FORMATS = ['png', 'jpg', 'jpeg', 'bmp', 'webp', 'gif', 'tiff']

# Encoder settings
WEBP_METHOD = 6
PNG_COMPRESS_LEVEL = 9

# Background requests
MAX_CONCURRENT_REQUESTS = 4

# Logging
LOG_FILE = "size_target.log"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 5
