HASH_ALIASES = {
    "xxhash": "xxhash",
    "xxh64": "xxhash",
    "md5": "md5",
}

HASH_CHOICES = list(HASH_ALIASES.keys())

HASH_HELP_TEXT = (
    "Digest used by the partial and full hash stages:\n"
    "  xxhash (xxh64) : fast non-cryptographic hash (default)\n"
    "  md5            : MD5, matches digests reported by other tools\n"
    "Duplicates are always confirmed byte by byte, whatever the digest."
)

PATTERN_HELP_TEXT = (
    "Glob pattern matched against file names (repeatable):\n"
    "  -p \"*.pdf\"               only PDF files\n"
    "  -p \"*.jpg\" -p \"*.png\"    images\n"
    "  -p \"backup*\"             names starting with backup"
)

REGEX_HELP_TEXT = (
    "Regular expression searched in file names:\n"
    "  --regex \"\\.pdf$\"                        PDF files\n"
    "  --regex \"photo_[0-9]+\\.jpg\"             photo_<number>.jpg\n"
    "  --regex \"\\.(txt|pdf|docx?|xlsx?|csv)$\"   office documents\n"
    "A file is scanned when it matches any pattern or the regex."
)

EPILOG_TEXT = """
Verification stages:
  1. file size  2. partial digest (first 8 KiB)  3. full digest  4. byte-by-byte compare

Examples:
  Find duplicates in the current directory
  %(prog)s

  Scan only the top level of Downloads, show sizes and savings
  %(prog)s ~/Downloads --no-recursive -S

  Only PDF and image files, print paths relative to the scan root
  %(prog)s ~/Documents -p "*.pdf" -p "*.jpg" -R

  Save a JSON report and a deletion script (keeps the first file of each group)
  %(prog)s ~/Photos --json report.json --delete-script delete_dups.sh

  Count hardlinks as duplicates
  %(prog)s /srv/backup -H

  Move duplicates to trash without confirmation (for scripts)
  %(prog)s ~/Downloads --keep-one --force > report.txt
"""
