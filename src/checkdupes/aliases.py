from checkdupes.core.models import FileOperation, MatchCriterion

# argparse dest -> criterion
CRITERION_FLAGS = {
    "inode": MatchCriterion.INODE,
    "size": MatchCriterion.SIZE,
    "name": MatchCriterion.NAME,
    "extension": MatchCriterion.EXTENSION,
    "time": MatchCriterion.TIME,
    "headtail": MatchCriterion.HEADTAIL,
    "checksum": MatchCriterion.CHECKSUM,
}

# argparse dest -> operation
OPERATION_FLAGS = {
    "list": FileOperation.LIST,
    "soft_link": FileOperation.SOFT_LINK,
    "move": FileOperation.MOVE,
    "move_back": FileOperation.MOVE_BACK,
    "link_extras": FileOperation.HARDLINK_EXTRAS,
    "remove_extras": FileOperation.REMOVE_EXTRAS,
    "copy_uniques": FileOperation.COPY_UNIQUES,
}

CRITERIA_HELP_TEXT = (
    "Match operations (any combination; files must agree on all of them):\n"
    "  -I inode     : hard links to the same data (runs alone)\n"
    "  -s size      : size in bytes (default)\n"
    "  -n name      : file name without extension\n"
    "  -e extension : extension, case-insensitive\n"
    "  -d time      : last modification time, exact\n"
    "  -H headtail  : first and last N bytes (see --headtail-length)\n"
    "  -c checksum  : full content checksum\n"
)

OPERATIONS_HELP_TEXT = (
    "File operations (only one):\n"
    "  -N : files are not touched (default)\n"
    "  -S : link all duplicates into target/LINKS_TO_DUPLICATES\n"
    "  -M : move all duplicates into target/DUPLICATES\n"
    "  -B : move files in target/DUPLICATES back to their origin\n"
    "  -L : replace extra duplicates by hard links to their master\n"
    "  -R : remove extra duplicates, keeping one master copy of each\n"
    "  -C : copy files of REFERENCE not present in target into target\n"
    "  -L and -R always enable checksum matching.\n"
)

EPILOG_TEXT = """
Examples:
  List files with the same size and modification time
  %(prog)s -sd ~/Documents

  Move probable duplicates aside, check them, then move them back
  %(prog)s -sdc -M ~/Documents
  %(prog)s -B ~/Documents

  Replace extra copies by hard links (checksum matching is implied)
  %(prog)s -L ~/Photos

  Copy into ~/Photos only the files of /media/card it does not hold yet
  %(prog)s -c -C /media/card ~/Photos
"""
