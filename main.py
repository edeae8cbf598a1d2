import asyncio
import argparse
import logging
import sys
from pathlib import Path

import aiofiles

from chunk_uploader.config import load_settings
from chunk_uploader.errors import InputError, UploadError
from chunk_uploader.transport import ArgumentMode, DfxTransport
from chunk_uploader.upload import ChunkUploader, UploadJob

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def setup_logging(log_file=None, debug=False, quiet=False):
    """Configure root logging"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    if debug:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def parse_bool(value: str) -> bool:
    """Parse a true/false flag value"""
    lowered = value.strip().lower()
    if lowered in ('true', '1', 'yes'):
        return True
    if lowered in ('false', '0', 'no'):
        return False
    raise argparse.ArgumentTypeError(f"Failed to parse {value!r} as boolean")


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Failed to parse {value!r} as integer")
    if number < 0:
        raise argparse.ArgumentTypeError(f"{value} must not be negative")
    return number


async def read_source(file_path: Path) -> bytes:
    """Read the whole file to upload"""
    try:
        async with aiofiles.open(file_path, 'rb') as f:
            return await f.read()
    except OSError as e:
        raise InputError(f"Cannot read {file_path}: {e}")


async def run_upload(args) -> int:
    """Run one upload job; returns the process exit status"""
    settings = load_settings(args.config).override(
        chunk_size=args.chunk_size,
        concurrent_uploads=args.concurrent_uploads,
        network=args.network,
        argument_mode=ArgumentMode(args.argument_mode) if args.argument_mode else None,
        include_index=args.with_index,
        dfx_binary=args.dfx,
    )

    if args.autoresume:
        logger.warning("--autoresume is not implemented; pass --offset to resume an upload")

    logger.info(f"Uploading {args.file_path}")
    data = await read_source(Path(args.file_path))

    job = UploadJob(
        data=data,
        canister_name=args.canister_name,
        method_name=args.canister_method,
        chunk_size=settings.chunk_size,
        start_offset=args.offset,
        network=settings.network,
        concurrent=args.concurrent,
        concurrency_limit=settings.concurrent_uploads,
        argument_mode=settings.argument_mode,
        include_index=settings.include_index,
    )

    result = await ChunkUploader(job, DfxTransport(settings.dfx_binary)).run()

    if not result.success:
        return 1

    logger.info(f"Uploaded {args.file_path} ({result.uploaded}/{result.total} chunks)")
    return 0


def create_parser():
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        description='Upload a file to a canister in size-bounded chunks',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Upload a model file, one chunk at a time
  python main.py my_canister upload_chunk ./model.onnx

  # Resume a failed upload from byte 4000000 on mainnet
  python main.py my_canister upload_chunk ./model.onnx --offset 4000000 --network ic

  # Upload with 8 calls in flight
  python main.py my_canister upload_chunk ./model.onnx --concurrent --concurrent-uploads 8
        """
    )

    parser.add_argument('canister_name', help='Target canister name or id')
    parser.add_argument('canister_method', help='Canister method receiving each chunk')
    parser.add_argument('file_path', help='File to upload')

    parser.add_argument(
        '--offset',
        type=non_negative_int,
        default=0,
        help='Byte offset to start uploading from (default: 0)'
    )
    parser.add_argument(
        '--network',
        default=None,
        help='dfx network to call (default: dfx default)'
    )
    parser.add_argument(
        '--autoresume',
        type=parse_bool,
        default=False,
        metavar='BOOL',
        help='Accepted for compatibility; not implemented'
    )
    parser.add_argument(
        '--concurrent',
        action='store_true',
        help='Upload chunks in parallel'
    )
    parser.add_argument(
        '--concurrent-uploads',
        type=non_negative_int,
        default=None,
        help='Maximum calls in flight with --concurrent (default: 5)'
    )

    # Settings
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='YAML settings file'
    )
    parser.add_argument(
        '--chunk-size',
        type=non_negative_int,
        default=None,
        help='Chunk size in bytes (default: 2000000)'
    )
    parser.add_argument(
        '--argument-mode',
        choices=[mode.value for mode in ArgumentMode],
        default=None,
        help='Pass chunks through a temporary file or inline (default: file)'
    )
    index_group = parser.add_mutually_exclusive_group()
    index_group.add_argument(
        '--with-index',
        dest='with_index',
        action='store_const',
        const=True,
        default=None,
        help='Send (index, blob) arguments (default with --concurrent)'
    )
    index_group.add_argument(
        '--without-index',
        dest='with_index',
        action='store_const',
        const=False,
        help='Send blob-only arguments (default without --concurrent)'
    )
    parser.add_argument(
        '--dfx',
        default=None,
        help='Path to the dfx binary (default: dfx)'
    )

    # Logging
    parser.add_argument(
        '--log-file',
        default=None,
        help='Also write logs to this file'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Minimal output'
    )

    return parser


async def main(argv=None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_file, debug=args.debug, quiet=args.quiet)

    try:
        return await run_upload(args)
    except UploadError as e:
        logger.error(str(e))
        return 1


def cli():
    """Console script entry"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("\nUpload cancelled by user")
        sys.exit(130)


if __name__ == '__main__':
    cli()
