"""Constants for morphit."""

from pathlib import Path

from morphit import __version__

# Application constants
APP_NAME = "morphit"
APP_VERSION = __version__

# Default paths
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_LOG_DIR = ".logs"
DEFAULT_CONFIG_FILE = "morphit.yaml"
TEMP_SUBDIR = "morphit"

# Config file locations (in order of priority)
CONFIG_LOCATIONS = [
    Path.cwd() / DEFAULT_CONFIG_FILE,
    Path.home() / ".config" / APP_NAME / "config.yaml",
]

# Process supervision
DEFAULT_POLL_INTERVAL = 0.1  # seconds between liveness checks after SIGINT
DEFAULT_GRACE_PERIOD = 1.0  # seconds before escalating to SIGTERM

# Tool location: searched in order after PATH
DEFAULT_TOOL_PREFIXES = [
    "/usr/local/bin",
    "/opt/homebrew/bin",
    "/opt/local/bin",
    "/usr/bin",
]
DEFAULT_TEX_DIRS = ["/Library/TeX/texbin"]

# Image defaults
DEFAULT_IMAGE_QUALITY = 85
DEFAULT_PDF_DPI = 300

# Media defaults
DEFAULT_VIDEO_BITRATE = "5"  # Mbit/s
DEFAULT_CRF = 23
DEFAULT_GIF_FPS = 10
DEFAULT_GIF_WIDTH = 480
DEFAULT_VBR_QUALITY = 2

# Speech defaults
DEFAULT_VOICE = "Samantha"
DEFAULT_SPEECH_RATE = 180
MIN_SPEECH_RATE = 120
MAX_SPEECH_RATE = 300

# OCR
DEFAULT_OCR_RENDER_DPI = 200
PDF_PAGE_SEPARATOR = "--- Page {number} ---"

# Archive
BUNDLED_ARCHIVE_STEM = "Archive"
MERGED_PDF_NAME = "merged.pdf"

# Output conflict strategies
CONFLICT_STRATEGIES = ["skip", "overwrite", "rename"]
