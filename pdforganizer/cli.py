"""CLI entrypoint for the PDF organizer.

Usage:
    python organize_pdfs.py list --dir ./library
    python organize_pdfs.py process --dir ./library
    python organize_pdfs.py process --batch-size 5 --dry-run
    python organize_pdfs.py process --yes --ocr
    python organize_pdfs.py standardized
    python organize_pdfs.py update-metadata
    python organize_pdfs.py history
"""

from __future__ import annotations

import argparse
import logging
from logging.handlers import RotatingFileHandler
import sys
import time
from pathlib import Path

log = logging.getLogger(__name__)

COMMANDS = ("list", "process", "standardized", "update-metadata", "history")


def _setup_logging(
    *,
    verbose: bool,
    detailed_logging: bool,
    log_dir: Path,
    log_file: Path | None,
) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    root_level = logging.DEBUG if verbose else logging.INFO
    root_logger.setLevel(root_level)

    console_fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    detailed_fmt = (
        "%(asctime)s | %(levelname)-8s | %(name)s | "
        "%(threadName)s | %(filename)s:%(lineno)d | %(message)s"
    )
    formatter = logging.Formatter(
        detailed_fmt if detailed_logging else console_fmt,
        "%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(root_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    resolved_log_file = log_file
    if resolved_log_file is None and detailed_logging:
        resolved_log_file = log_dir / "organizer.log"

    if resolved_log_file is not None:
        resolved_log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            resolved_log_file,
            maxBytes=20 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(detailed_fmt, "%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)

    logging.getLogger("pypdf").setLevel(logging.WARNING)
    logging.getLogger("docling").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    from .utils import DEFAULT_BATCH_SIZE, RECORDS_FILE_NAME, SETTINGS_FILE_NAME

    parser = argparse.ArgumentParser(
        description="Classify PDFs and rename them to '<Type> - <Author> - <Title>.pdf'"
    )
    parser.add_argument("command", choices=COMMANDS, help="Operation to run")
    parser.add_argument(
        "--dir",
        type=Path,
        default=None,
        help="Directory with PDFs (default: last directory used)",
    )
    parser.add_argument(
        "--records-file",
        type=Path,
        default=Path(RECORDS_FILE_NAME),
        help=f"Decision records JSON (default: {RECORDS_FILE_NAME})",
    )
    parser.add_argument(
        "--settings-file",
        type=Path,
        default=Path(SETTINGS_FILE_NAME),
        help=f"Settings JSON (default: {SETTINGS_FILE_NAME})",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Files per review batch (default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Accept every proposal without prompting",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show proposals without renaming or recording anything",
    )
    parser.add_argument(
        "--ocr",
        action="store_true",
        help="Read page text through Docling OCR (scanned PDFs)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--detailed-logging",
        action="store_true",
        help="Enable detailed logging (thread, file/line, rotating log file)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional log file path (default: organizer.log in detailed mode)",
    )
    args = parser.parse_args(argv)
    if args.batch_size < 1:
        parser.error("--batch-size must be positive")
    return args


def _confirm(question: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    answer = input(f"{question} [y/N] ")
    return answer.strip().lower() in {"y", "yes", "s", "sim"}


def _print_paths(paths: list[Path]) -> None:
    for i, path in enumerate(paths, start=1):
        print(f"{i:4d}. {path.name}")


def _run_process(organizer, args: argparse.Namespace) -> None:
    from tqdm import tqdm

    from .batching import batch, total_batches

    candidates = organizer.list_non_standardized()
    if not candidates:
        log.info("All PDF files in %s are already standardized.", organizer.directory)
        return

    total = total_batches(candidates, args.batch_size)
    log.info("%s files to review in %s batches", len(candidates), total)
    renamed = rejected = failed = 0

    for index in range(total):
        files = batch(candidates, index, args.batch_size)
        desc = f"Batch {index + 1}/{total}"

        if args.dry_run:
            for path in tqdm(files, desc=desc):
                print(f"{path.name}\n    -> {organizer.synthesizer.propose(path)}")
            continue

        records = [organizer.process_file(path) for path in tqdm(files, desc=desc)]
        for record in records:
            print(f"\n{record.original_name}\n    -> {record.proposed_name}")
            path = Path(record.file_path)
            if _confirm("Accept this name?", args.yes):
                if organizer.rename_file(path, record.proposed_name):
                    renamed += 1
                else:
                    failed += 1
                    log.error("Could not rename %s", path.name)
            elif organizer.reject_file(path):
                rejected += 1

        if index + 1 < total and not _confirm("Continue with the next batch?", args.yes):
            log.info("Stopped after batch %s of %s", index + 1, total)
            break

    log.info("Renamed: %s  Rejected: %s  Failed: %s", renamed, rejected, failed)


def _run_update_metadata(organizer, args: argparse.Namespace) -> None:
    files = organizer.list_standardized()
    if not files:
        log.info("No standardized files in %s.", organizer.directory)
        return

    updated = declined = failed = 0
    for path in files:
        author, title = organizer.extract_info_from_file_name(path)
        print(f"\n{path.name}\n    author: {author}\n    title:  {title}")
        if args.dry_run:
            continue
        if not _confirm("Write this metadata?", args.yes):
            organizer.reject_metadata_update(path)
            declined += 1
        elif organizer.update_metadata(path):
            updated += 1
        else:
            failed += 1

    log.info("Updated: %s  Declined: %s  Failed: %s", updated, declined, failed)


def _run_history(organizer) -> None:
    records = organizer.history()
    if not records:
        print("No operations recorded.")
        return
    for record in records:
        print(
            f"{record.operation_date:%Y-%m-%d %H:%M:%S} | "
            f"{record.state.rename_status:<8} | {record.original_name} -> "
            f"{record.proposed_name or '-'}"
        )


def main(argv: list[str] | None = None) -> None:
    """Run one organizer command."""
    from .organizer import FileOrganizer
    from .records import RecordStateMachine, RecordStore
    from .sources import PdfTextSource

    args = parse_args(argv)
    _setup_logging(
        verbose=args.verbose,
        detailed_logging=args.detailed_logging,
        log_dir=args.records_file.parent,
        log_file=args.log_file,
    )
    t0 = time.perf_counter()

    if args.ocr:
        from .conversion import OcrTextSource

        source = OcrTextSource()
    else:
        source = PdfTextSource()

    organizer = FileOrganizer(
        source=source,
        records=RecordStateMachine(RecordStore(args.records_file)),
        settings_path=args.settings_file,
        batch_size=args.batch_size,
    )

    if args.dir is not None and not organizer.set_directory(args.dir):
        log.error("Directory not found: %s", args.dir)
        sys.exit(1)
    if args.command != "history" and organizer.directory is None:
        log.error("No directory selected; pass --dir")
        sys.exit(1)

    log.debug("Command=%s directory=%s", args.command, organizer.directory)

    if args.command == "list":
        files = organizer.list_non_standardized()
        print(f"{len(files)} non-standardized files in {organizer.directory}")
        _print_paths(files)
    elif args.command == "standardized":
        files = organizer.list_standardized()
        print(f"{len(files)} standardized files in {organizer.directory}")
        _print_paths(files)
    elif args.command == "process":
        _run_process(organizer, args)
    elif args.command == "update-metadata":
        _run_update_metadata(organizer, args)
    else:
        _run_history(organizer)

    log.debug("Finished in %.2fs", time.perf_counter() - t0)
