from redup.core.models import OutputFormat

FORMAT_ALIASES = {
    "txt": OutputFormat.TEXT,
    "text": OutputFormat.TEXT,
    "csv": OutputFormat.CSV,
    "sql": OutputFormat.SQL,
    "sqlite": OutputFormat.SQL,
    "db": OutputFormat.SQL,
}

FORMAT_CHOICES = list(FORMAT_ALIASES.keys())

FORMAT_HELP_TEXT = (
    "Output format (Default: txt):\n"
    "  txt, text          : One block per duplicate group, one path per line\n"
    "  csv                : Records of fingerprint,path,group_id\n"
    "  sql, sqlite, db    : SQLite database with 'duplicate_groups' and 'files' tables (needs --output)\n"
)

EPILOG_TEXT = """
The files are hashed so even files with the same name
will be found.

Examples:
  Find duplicates in Downloads folder
  %(prog)s ~/Downloads

  Scan several folders at once and save CSV records
  %(prog)s ~/Pictures /mnt/backup/Pictures -f csv -o dupes.csv

  Read file paths from standard input
  ls ~/Music/*.mp3 | %(prog)s --stdin

  Store results in a SQLite database with fewer concurrent reads
  %(prog)s ~/Downloads -j 16 -f sql -o dupes.db
"""
