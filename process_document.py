"""
Split a statute or contract file into segments
Usage: python process_document.py <path_to_file> [output_dir] [document_type]
"""
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from app.api.document import process_file


def process_legal_document(file_path: str, output_dir: str = None, document_type: str = None):
    """
    Split a PDF or TXT document and optionally dump the segments

    Args:
        file_path: Path to the PDF or TXT file
        output_dir: Optional directory to save the segments
        document_type: LAW, REGULATION, CONTRACT, ... (guessed from the filename if omitted)
    """
    if not Path(file_path).exists():
        logger.error(f"File not found: {file_path}")
        return None

    logger.info(f"Processing document: {file_path}")
    result = process_file(file_path, document_type=document_type)

    if not result.success:
        logger.error(f"Processing failed: {result.message}")
        return result

    lengths = [len(segment.text) for segment in result.segments]
    logger.info("Processing complete!")
    logger.info(f"Splitter: {result.splitter_type}")
    logger.info(f"Total segments: {result.segment_count}")
    logger.info(f"Average segment size: {sum(lengths) / len(lengths):.0f} characters")

    # Optionally save to file
    if output_dir:
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        output_file = output_path / f"{Path(file_path).stem}_segments.txt"
        with open(output_file, 'w', encoding='utf-8') as f:
            for idx, segment in enumerate(result.segments, 1):
                f.write(f"{'='*80}\n")
                f.write(f"SEGMENT {idx}\n")
                f.write(f"{'='*80}\n")
                f.write(f"Metadata: {segment.metadata}\n\n")
                f.write(segment.text)
                f.write(f"\n\n")

        logger.info(f"Segments saved to: {output_file}")

    return result


def main():
    """Main entry point"""
    load_dotenv()

    if len(sys.argv) < 2:
        logger.info("Usage: python process_document.py <path_to_file> [output_dir] [document_type]")
        logger.info("\nExample:")
        logger.info("  python process_document.py 民法典.txt")
        logger.info("  python process_document.py contract.pdf ./output CONTRACT")
        return

    file_path = sys.argv[1]
    output_dir = sys.argv[2] if len(sys.argv) > 2 else None
    document_type = sys.argv[3] if len(sys.argv) > 3 else None

    result = process_legal_document(file_path, output_dir, document_type)

    if result and result.success:
        first = result.segments[0]
        logger.info("\n" + "="*80)
        logger.info("PREVIEW - First Segment:")
        logger.info("="*80)
        logger.info(f"Metadata: {first.metadata}")
        logger.info(f"\nContent:\n{first.text[:500]}...")


if __name__ == "__main__":
    main()
