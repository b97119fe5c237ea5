"""Command-line interface for receipt text extraction."""

import logging
import click
from pathlib import Path
from typing import List, Optional, Tuple
import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from tqdm import tqdm
import sys
from datetime import datetime
from collections import Counter

from .parse import ReceiptParser
from .classify import CategoryClassifier
from .models import ParsedReceipt
from .review import ReviewQueue
from .export import ExcelExporter

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)
logger = logging.getLogger(__name__)

OCR_FILE_PATTERNS = ['*.txt', '*.TXT', '*.json', '*.JSON']


def load_ocr_text(path: Path) -> str:
    """
    Read OCR output from disk.

    Plain text files are returned verbatim. JSON files may hold
    {"full_text": ...}, {"text_blocks": [...]} or a list of blocks (strings
    or {"text": ...} objects); blocks are joined one per line.

    Args:
        path: Path to a .txt or .json OCR file

    Returns:
        OCR text in reading order
    """
    path = Path(path)
    raw = path.read_text(encoding='utf-8')
    if path.suffix.lower() != '.json':
        return raw

    data = json.loads(raw)
    if isinstance(data, dict):
        if isinstance(data.get('full_text'), str):
            return data['full_text']
        data = data.get('text_blocks')

    if isinstance(data, list):
        blocks = []
        for block in data:
            if isinstance(block, str):
                blocks.append(block)
            elif isinstance(block, dict) and isinstance(block.get('text'), str):
                blocks.append(block['text'])
            else:
                raise ValueError(f"Unsupported OCR text block in {path.name}: {block!r}")
        return '\n'.join(blocks)

    raise ValueError(f"Unsupported OCR JSON layout in {path.name}")


def determine_month_year(receipts: List[ParsedReceipt]) -> str:
    """
    Determine the most common month/year among receipt dates.

    Returns:
        String like "July 2024", or "Mixed Months" if no month has a majority
    """
    if not receipts:
        return "Unknown Period"

    counts = Counter(receipt.date.strftime('%B %Y') for receipt in receipts)
    month_year, count = counts.most_common(1)[0]
    if count / len(receipts) > 0.5:
        return month_year
    return "Mixed Months"


def find_ocr_files(input_dir: Path) -> List[Path]:
    """Find all OCR text/JSON files under the input directory."""
    found = set()
    for pattern in OCR_FILE_PATTERNS:
        found.update(input_dir.glob(f'**/{pattern}'))
    files = sorted(found)
    logger.info(f"Found {len(files)} OCR files in {input_dir}")
    return files


class BatchProcessor:
    """Parse a folder of OCR files in parallel."""

    def __init__(self, parser: ReceiptParser, max_workers: int = 4):
        self.parser = parser
        self.max_workers = max_workers
        self.review_queue = ReviewQueue()
        self.stats = Counter()
        self.failures: List[Tuple[Path, str]] = []

    def process_file(self, path: Path) -> ParsedReceipt:
        logger.debug(f"Processing {path.name}")
        return self.parser.parse_receipt(load_ocr_text(path))

    def process_batch(self, files: List[Path]) -> List[Tuple[str, ParsedReceipt]]:
        """
        Parse every file; failures are recorded and skipped.

        Returns:
            (file_path, ParsedReceipt) pairs in file order
        """
        self.stats['total_files'] = len(files)
        results = {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_file = {executor.submit(self.process_file, path): path for path in files}

            with tqdm(total=len(files), desc="Parsing receipts") as pbar:
                for future in as_completed(future_to_file):
                    path = future_to_file[future]
                    try:
                        results[path] = future.result()
                        self.stats['processed'] += 1
                    except (OSError, ValueError) as e:
                        logger.error(f"Failed to process {path}: {e}")
                        self.stats['failed'] += 1
                        self.failures.append((path, str(e)))

                    pbar.update(1)
                    pbar.set_postfix({'processed': self.stats['processed'], 'failed': self.stats['failed']})

        ordered = [(str(path), results[path]) for path in files if path in results]
        for file_path, receipt in ordered:
            if self.review_queue.add_from_receipt(file_path, receipt):
                self.stats['review'] += 1

        logger.info(f"Batch processing complete. Processed: {self.stats['processed']}, "
                    f"Failed: {self.stats['failed']}, Review items: {self.stats['review']}")
        return ordered


def _build_parser(rules: Optional[Path], today: Optional[datetime]) -> ReceiptParser:
    classifier = CategoryClassifier(rules) if rules else None
    return ReceiptParser(classifier=classifier, today=today.date() if today else None)


def _enable_debug():
    logging.getLogger().setLevel(logging.DEBUG)
    click.echo("Debug mode enabled - detailed parsing logs will be shown", err=True)


@click.group()
def cli():
    """Receipt Engine - Extract structured data from receipt OCR text."""
    pass


@cli.command()
@click.argument('ocr_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--rules', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Path to category rules file')
@click.option('--today', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Reference date for date validation and fallback (YYYY-MM-DD)')
@click.option('--debug', is_flag=True, help='Enable debug output')
def parse(ocr_file: Path, rules: Optional[Path], today: Optional[datetime], debug: bool):
    """
    Parse one OCR text file and print the receipt as JSON.

    Example:
        receipts parse ./ocr/jollibee.txt --today 2024-12-31
    """
    if debug:
        _enable_debug()

    try:
        parser = _build_parser(rules, today)
        receipt = parser.parse_receipt(load_ocr_text(ocr_file))
    except (OSError, ValueError) as e:
        logger.error(f"Parsing failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(receipt.to_dict(), ensure_ascii=False, indent=2))


@cli.command()
@click.option('--in', 'input_dir', required=True, type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='Input directory containing OCR .txt/.json files')
@click.option('--out', 'output_dir', required=True, type=click.Path(file_okay=False, path_type=Path),
              help='Output directory for results')
@click.option('--rules', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Path to category rules file')
@click.option('--today', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Reference date for date validation and fallback (YYYY-MM-DD)')
@click.option('--max-workers', default=4, type=click.IntRange(min=1),
              help='Maximum number of parallel workers')
@click.option('--summary', is_flag=True, help='Include summary block in Excel output')
@click.option('--debug', is_flag=True, help='Enable debug output')
def run(input_dir: Path,
        output_dir: Path,
        rules: Optional[Path],
        today: Optional[datetime],
        max_workers: int,
        summary: bool,
        debug: bool):
    """
    Parse a folder of OCR files and generate Excel output.

    Example:
        receipts run --in ./ocr --out ./out --summary
    """
    if debug:
        _enable_debug()

    try:
        output_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Input directory: {input_dir}")
        logger.info(f"Output directory: {output_dir}")

        processor = BatchProcessor(_build_parser(rules, today), max_workers=max_workers)
        files = find_ocr_files(input_dir)
        if not files:
            logger.warning("No OCR files found!")
            click.echo("No OCR files found.")
            return

        results = processor.process_batch(files)
        if not results:
            click.echo("No files were processed successfully!", err=True)
            sys.exit(1)

        month_year = determine_month_year([receipt for _, receipt in results])
        excel_path = output_dir / f"receipts_{month_year.replace(' ', '_')}.xlsx"
        ExcelExporter(excel_path).export_receipts(
            results,
            review_items=processor.review_queue.items,
            include_summary=summary
        )
    except (OSError, ValueError) as e:
        logger.error(f"Processing failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("\n" + "=" * 50)
    click.echo("PROCESSING SUMMARY")
    click.echo("=" * 50)
    click.echo(f"Total files found: {processor.stats['total_files']}")
    click.echo(f"Successfully processed: {processor.stats['processed']}")
    click.echo(f"Failed: {processor.stats['failed']}")
    click.echo(f"Items needing review: {len(processor.review_queue.items)}")
    click.echo(f"Period detected: {month_year}")
    click.echo(f"Excel: {excel_path}")

    for path, reason in processor.failures[:10]:
        click.echo(f"  - {path.name}: {reason}")


if __name__ == '__main__':
    cli()
