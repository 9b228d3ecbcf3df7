from keepone.core.models import FileType
from keepone.core.sorter import GroupSortOrder

PARTIAL_HASH_CHOICES = ["sha256", "xxh64"]

PARTIAL_HASH_HELP_TEXT = (
    "Digest used for the cheap first-4KB comparison:\n"
    "  sha256 : cryptographic, same as the full pass (default)\n"
    "  xxh64  : much faster prefix pass; every match is still confirmed by full SHA-256\n"
)

SORT_ALIASES = {
    "wasted": GroupSortOrder.WASTED_DESC,
    "wasted-asc": GroupSortOrder.WASTED_ASC,
    "size": GroupSortOrder.SIZE_DESC,
    "size-asc": GroupSortOrder.SIZE_ASC,
    "copies": GroupSortOrder.COPIES_DESC,
}

SORT_CHOICES = list(SORT_ALIASES.keys())

SORT_HELP_TEXT = (
    "Order of duplicate groups in the report:\n"
    "  wasted     : most reclaimable space first (default)\n"
    "  wasted-asc : least reclaimable space first\n"
    "  size       : largest files first\n"
    "  size-asc   : smallest files first\n"
    "  copies     : most copies first\n"
)

TYPE_ALIASES = {
    "image": FileType.IMAGE,
    "video": FileType.VIDEO,
    "audio": FileType.AUDIO,
    "document": FileType.DOCUMENT,
    "archive": FileType.ARCHIVE,
    "other": FileType.OTHER,
}

TYPE_CHOICES = list(TYPE_ALIASES.keys())

EPILOG_TEXT = """
Examples:
  Find duplicates in Downloads (files of 1KB and more)
  %(prog)s -i ~/Downloads

  Only files between 500KB and 10MB, hashed by 4 threads
  %(prog)s -i ~/Downloads -m 500KB -M 10MB --workers 4

  Keep the newest copy of every group and move the rest to trash (asks first)
  %(prog)s -i ~/Downloads --reclaim

  Same as above without confirmation, report to a file (for scripts)
  %(prog)s -i ~/Downloads --reclaim --force > ~/Downloads/report.txt

  Only show duplicate images whose path contains "vacation"
  %(prog)s -i ~/Pictures --type image --search vacation
"""
