"""CLI shim -- delegates to pdforganizer.cli.main().

Usage:
    python organize_pdfs.py list --dir ./library
    python organize_pdfs.py process --dir ./library
"""

from pdforganizer.cli import main

if __name__ == "__main__":
    main()
