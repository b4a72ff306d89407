"""
System constants that should never change.

These are format and protocol values, not user preferences.
User-configurable values go in settings.yaml instead.
"""

# Matroska family extensions and the EBML header signature
MKV_EXTENSIONS = frozenset({".mkv", ".mka", ".mks"})
EBML_MAGIC = b"\x1a\x45\xdf\xa3"

# Defaults used when no settings file exists
DEFAULT_CONFIG_FILENAME = "settings.yaml"
DEFAULT_AUDIO_LANGUAGES = ("eng", "jpn", "und")
DEFAULT_SUBTITLE_LANGUAGES = ("eng", "spa")

# Tools
MKVMERGE_COMMAND = "mkvmerge"
FFPROBE_COMMAND = "ffprobe"
FFPROBE_TIMEOUT_SECONDS = 60

# mkvmerge: 0 = ok, 1 = finished with warnings, 2 = error
MKVMERGE_WARNING_EXIT_CODE = 1

# Status lines understood by Sonarr custom import scripts
MOVE_STATUS_MOVE_COMPLETE = "[MoveStatus] MoveComplete"
MOVE_STATUS_RENAME_REQUESTED = "[MoveStatus] RenameRequested"

# Table formatting
MAX_FILENAME_LENGTH = 37
FILENAME_TRUNCATE_LENGTH = 34
MAX_ERROR_MSG_LENGTH = 60
ERROR_MSG_TRUNCATE_LENGTH = 57
MAX_TITLE_LENGTH = 30
ATTACHMENT_SUMMARY_THRESHOLD = 10
ATTACHMENT_PREVIEW_COUNT = 5
