"""
Command Line Interface for docs2slides

Provides entry points for:
- convert: Convert a document (.json / .docx) into a .pptx deck
- extract: Save the extracted content element stream as JSON
- inspect: Show the section / element breakdown of a document
- validate: Validate a content stream JSON file
"""

import sys
import json
import logging
import argparse
from pathlib import Path

from .config import load_config
from .content import load_content_stream, save_content_stream, validate_content_json
from .convert import convert_file
from .errors import Docs2SlidesError
from .extract import extract_content
from .paginate import paginate
from .readers import read_document, reader_for_path


def _fail(args: argparse.Namespace, error: Exception) -> int:
    print(f"\nError: {error}")
    if getattr(args, 'verbose', False):
        import traceback
        traceback.print_exc()
    return 1


def convert_command(args: argparse.Namespace) -> int:
    """Execute convert command."""
    print("=" * 60)
    print("Document to Slides Conversion")
    print("=" * 60)

    try:
        config = load_config(args.config)
        print(f"Input: {args.input}")
        if args.template:
            print(f"Template: {args.template}")

        result = convert_file(
            args.input,
            args.output,
            config=config,
            template=args.template,
            title=args.title,
            image_dir=args.image_dir,
        )

        print(f"Title: {result.title}")
        result.report.print_report()

        if args.report_json:
            with open(args.report_json, 'w', encoding='utf-8') as f:
                json.dump(result.report.to_dict(), f, indent=2)
            print(f"Saved report to: {args.report_json}")

        print(f"\nSaved presentation to: {result.location}")
        return 0

    except (Docs2SlidesError, OSError, ValueError) as e:
        return _fail(args, e)


def extract_command(args: argparse.Namespace) -> int:
    """Execute extract command."""
    print("=" * 60)
    print("Content Extraction")
    print("=" * 60)

    try:
        config = load_config(args.config)
        document = read_document(args.input, image_dir=args.image_dir)
        result = extract_content(document, config)

        output = args.output or str(Path(args.input).with_suffix('.content.json'))
        save_content_stream(result.to_stream(), output)

        print(f"Elements: {len(result.elements)}  |  Sections: {result.section_count}")
        if result.issues:
            print(f"Skipped: {len(result.issues)} (see inspect for details)")
        if not args.image_dir and Path(args.input).suffix.lower() == '.docx':
            # The saved stream points at the unpacked images, so they stay
            print("Images unpacked to a temporary directory; pass --image-dir to choose where")
        print(f"\nSaved content to: {output}")
        return 0

    except (Docs2SlidesError, OSError, ValueError) as e:
        return _fail(args, e)


def inspect_command(args: argparse.Namespace) -> int:
    """Execute inspect command."""
    try:
        config = load_config(args.config)
        if args.input.endswith('.content.json'):
            stream = load_content_stream(args.input)
            elements, issues = stream.elements, []
        else:
            reader = reader_for_path(args.input, image_dir=args.image_dir)
            try:
                result = extract_content(reader.fetch(args.input), config)
            finally:
                reader.close()
            elements, issues = result.elements, result.issues

        chunks = paginate(elements, config.pagination)

        if args.json:
            print(json.dumps({
                'elements': [e.model_dump(mode='json', exclude_none=True) for e in elements],
                'chunks': [c.model_dump(mode='json', exclude={'element'}) for c in chunks],
                'issues': [i.code for i in issues],
            }, indent=2))
            return 0

        print("=" * 60)
        print(f"DOCUMENT STRUCTURE: {args.input}")
        print("=" * 60)
        for element in elements:
            indent = "  " * element.section_level
            print(f"{indent}{element.describe()[:100]}")

        print("-" * 60)
        sections = sum(1 for e in elements if e.is_section)
        print(f"Elements: {len(elements)}  |  Sections: {sections}  |  Slides: {len(chunks)}")
        for issue in issues:
            print(f"  {issue.code}: {issue.message} ({issue.identifier})")
        return 0

    except (Docs2SlidesError, OSError, ValueError) as e:
        return _fail(args, e)


def validate_command(args: argparse.Namespace) -> int:
    """Execute validate command."""
    errors = validate_content_json(args.input)
    if not errors:
        print(f"{args.input}: valid")
        return 0

    print(f"{args.input}: {len(errors)} error(s)")
    for error in errors:
        print(f"  - {error}")
    return 1


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='docs2slides - Convert structured documents into slide decks',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s convert document.json deck.pptx --config settings.yaml
  %(prog)s convert report.docx deck.pptx --template brand.pptx --report-json report.json
  %(prog)s extract document.json --output document.content.json
  %(prog)s inspect report.docx
  %(prog)s validate document.content.json
        """
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Show detailed output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Convert command
    convert_parser = subparsers.add_parser('convert', help='Convert a document into a .pptx deck')
    convert_parser.add_argument('input', help='Source document (.json Google Docs export or .docx)')
    convert_parser.add_argument('output', help='Output PPTX file')
    convert_parser.add_argument('--config', '-c', help='Conversion configuration file (YAML/JSON)')
    convert_parser.add_argument('--template', '-t', help='Template PPTX to build slides from')
    convert_parser.add_argument('--title', help='Presentation title (default: document title)')
    convert_parser.add_argument('--image-dir', metavar='PATH', help='Where to unpack .docx images')
    convert_parser.add_argument('--report-json', metavar='PATH', help='Also save the conversion report as JSON')
    convert_parser.add_argument('-v', '--verbose', action='store_true', default=argparse.SUPPRESS,
                                help='Show detailed output')

    # Extract command
    extract_parser = subparsers.add_parser('extract', help='Save the extracted content stream')
    extract_parser.add_argument('input', help='Source document (.json or .docx)')
    extract_parser.add_argument('--output', '-o', help='Output JSON file (default: input.content.json)')
    extract_parser.add_argument('--config', '-c', help='Conversion configuration file (YAML/JSON)')
    extract_parser.add_argument('--image-dir', metavar='PATH', help='Where to unpack .docx images')
    extract_parser.add_argument('-v', '--verbose', action='store_true', default=argparse.SUPPRESS,
                                help='Show detailed output')

    # Inspect command
    inspect_parser = subparsers.add_parser('inspect', help='Show sections, elements and slide count')
    inspect_parser.add_argument('input', help='Source document or .content.json stream')
    inspect_parser.add_argument('--config', '-c', help='Conversion configuration file (YAML/JSON)')
    inspect_parser.add_argument('--image-dir', metavar='PATH', help='Where to unpack .docx images')
    inspect_parser.add_argument('--json', action='store_true', help='Output results as JSON')
    inspect_parser.add_argument('-v', '--verbose', action='store_true', default=argparse.SUPPRESS,
                                help='Show detailed output')

    # Validate command
    validate_parser = subparsers.add_parser('validate', help='Validate a content stream JSON file')
    validate_parser.add_argument('input', help='Content stream JSON file')
    validate_parser.add_argument('-v', '--verbose', action='store_true', default=argparse.SUPPRESS,
                                help='Show detailed output')

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == 'convert':
        return convert_command(args)
    elif args.command == 'extract':
        return extract_command(args)
    elif args.command == 'inspect':
        return inspect_command(args)
    elif args.command == 'validate':
        return validate_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
