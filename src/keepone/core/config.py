"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/config.py
Constants shared by the scan pipeline: read sizes, progress cadence,
name/extension exclusion tables and the progress band of every phase.
"""


class ScanConfig:
    DEFAULT_MIN_SIZE = 1024              # Smaller files are never worth hashing
    PARTIAL_HASH_SIZE = 4 * 1024         # Prefix read by the partial hasher
    FULL_HASH_CHUNK_SIZE = 64 * 1024     # Streaming chunk for the full hasher

    PROGRESS_INTERVAL = 0.1              # seconds
    PROGRESS_EVERY_N_FILES = 1000

    # Basenames never considered (VCS dirs, OS metadata sentinels)
    SKIP_FILE_NAMES = frozenset({
        ".DS_Store", ".localized", ".Spotlight-V100", ".Trashes",
        ".fseventsd", ".TemporaryItems", "Thumbs.db", "desktop.ini",
        ".git", ".svn", ".hg",
    })

    # Transient and lock files, compared without the leading dot
    SKIP_EXTENSIONS = frozenset({"tmp", "temp", "swp", "swo", "lock", "pid"})

    # Directories treated as opaque bundles: never descended
    PACKAGE_EXTENSIONS = frozenset({
        ".app", ".bundle", ".framework", ".plugin", ".kext", ".photoslibrary",
        ".musiclibrary", ".xcodeproj", ".xcworkspace", ".pkg", ".mpkg",
    })

    # Progress bands: (start, end) fraction of each phase
    ENUMERATION_START = 0.05
    ENUMERATION_CAP = 0.15
    ENUMERATION_END = 0.2
    ENUMERATION_SCALE = 100_000          # files that fill the enumeration band
    PARTIAL_HASH_BAND = (0.2, 0.5)
    FULL_HASH_BAND = (0.5, 0.9)
    FINALIZING = 0.95

    @staticmethod
    def enumeration_fraction(files_found: int) -> float:
        """Open-ended phase: grows with files found but never reaches the phase bound."""
        span = ScanConfig.ENUMERATION_CAP - ScanConfig.ENUMERATION_START
        return min(
            ScanConfig.ENUMERATION_CAP,
            ScanConfig.ENUMERATION_START + files_found / ScanConfig.ENUMERATION_SCALE * span,
        )
