"""
Atomic file writer - ensures no partial writes or corrupted files.
Implements temp-write → fsync → rename pattern for durability.
"""

import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict


def write_file_atomic(output_path: Path, write_fn: Callable[[Path], None]) -> Dict[str, Any]:
    """
    Produce a file atomically through a caller-supplied writer.

    ``write_fn`` receives a temporary path in the target directory and must
    write the complete file there; it is then renamed over ``output_path``.
    Whatever goes wrong, ``output_path`` is either the old file or the new
    complete one.

    Args:
        output_path: Final path for the file
        write_fn: Callable that writes the file to the path it is given

    Returns:
        Dictionary with write results ('status' is 'completed' or 'failed')
    """
    start_time = time.time()
    output_path = Path(output_path)
    temp_path = None

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)

        # Temp file in same directory so the rename stays on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            suffix=f'.tmp{output_path.suffix}',
            prefix=f'{output_path.stem}_',
            dir=output_path.parent
        )
        os.close(temp_fd)
        temp_path = Path(temp_path_str)

        write_fn(temp_path)

        with open(temp_path, 'rb+') as f:
            os.fsync(f.fileno())

        os.replace(temp_path, output_path)
        temp_path = None

        return {
            'status': 'completed',
            'output_path': str(output_path),
            'bytes_written': output_path.stat().st_size,
            'duration_seconds': time.time() - start_time
        }

    except Exception as e:
        return {
            'status': 'failed',
            'error': str(e),
            'output_path': str(output_path),
            'bytes_written': 0,
            'duration_seconds': time.time() - start_time
        }

    finally:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass  # Best effort cleanup
