"""
Command-line interface for pdfrecord.
"""

import logging
import os
import sys

import click
from rich.console import Console

from pdfrecord.exceptions import OpenError, OutputError, PDFRecordException, RangeError
from pdfrecord.options import DEFAULT_MAX_OUTLINE_DEPTH, Options
from pdfrecord.reader import PDFReader
from pdfrecord.utils import set_log_level
from pdfrecord.version import __version__

console = Console(stderr=True)


@click.command()
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--output', '-o',
    default=None,
    help='Write the record to this file instead of stdout',
    type=click.Path(dir_okay=False)
)
@click.option('--force', '-f', is_flag=True, help='Overwrite the output file if it exists')
@click.option(
    '--page', '-p',
    'page_number',
    default=None,
    help='Only process this page (0-indexed)',
    type=click.IntRange(min=0)
)
@click.option('--omit-outline', is_flag=True, help='Do not extract the document outline')
@click.option('--links-only', is_flag=True, help='Only extract link annotations from pages')
@click.option('--force-font-preprocess', is_flag=True, help='Scan fonts before emitting the meta')
@click.option('--use-page-crop-box', is_flag=True, help='Measure link positions against the crop box')
@click.option('--debug-meta', is_flag=True, help='Include the document font list in the meta')
@click.option('--owner-password', default='', help='Owner password for encrypted documents')
@click.option('--user-password', default='', help='User password for encrypted documents')
@click.option(
    '--max-outline-depth',
    default=DEFAULT_MAX_OUTLINE_DEPTH,
    show_default=True,
    help='Deepest outline level to expand',
    type=click.IntRange(min=1)
)
@click.option('--verbose', '-v', is_flag=True, help='Log processing details to stderr')
@click.version_option(version=__version__)
def cli(input_pdf, output, force, page_number, omit_outline, links_only, force_font_preprocess,
        use_page_crop_box, debug_meta, owner_password, user_password, max_outline_depth, verbose):
    """
    Extract the outline, links and metadata of INPUT_PDF as a JSON record.

    Examples:

        pdfrecord input.pdf

        pdfrecord input.pdf -p 0 -o page1.json

        pdfrecord input.pdf --links-only --use-page-crop-box
    """
    set_log_level(logging.DEBUG if verbose else logging.WARNING)

    options = Options(
        pdf_filename=input_pdf,
        page_number=page_number,
        omit_outline=omit_outline,
        link_output_only=links_only,
        force_pre_process_fonts=force_font_preprocess,
        use_page_crop_box=use_page_crop_box,
        include_debug_info=debug_meta,
        owner_password=owner_password,
        user_password=user_password,
        max_outline_depth=max_outline_depth,
    )

    try:
        if output and os.path.exists(output) and not force:
            raise OutputError(f"Output file '{output}' exists; use --force to overwrite it")

        with PDFReader(options) as reader:
            if output:
                with open(output, 'w', encoding='utf-8') as handle:
                    reader.process(handle)
                    handle.write('\n')
            else:
                stream = click.get_text_stream('stdout')
                reader.process(stream)
                stream.write('\n')

    except RangeError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(2)
    except OpenError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)
    except PDFRecordException as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)
    except OSError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)


if __name__ == '__main__':
    cli()
