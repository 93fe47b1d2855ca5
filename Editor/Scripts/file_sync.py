#
# Copyright (c) Contributors to the Open 3D Engine Project.
# For complete copyright and license terms please see the LICENSE at the root of this distribution.
#
# SPDX-License-Identifier: Apache-2.0 OR MIT
#
"""
Change-gated file writes.

Rewriting an unchanged project file makes the IDE reload it, so generated text
is only written when it differs from what is already on disk. Files are read
and written with newline translation disabled; generated content carries its
own line endings.
"""

import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger("VSCodeProjectGeneration.FileSync")

FILE_ENCODING = "utf-8"


def read_text_exact(path: Union[str, Path]) -> Optional[str]:
    """Read a file without newline translation; None if it is missing or unreadable."""
    try:
        with open(path, "r", encoding=FILE_ENCODING, newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError):
        return None


def write_text_exact(path: Union[str, Path], contents: str) -> None:
    with open(path, "w", encoding=FILE_ENCODING, newline="") as f:
        f.write(contents)


def sync_file_if_not_changed(path: Union[str, Path], new_contents: str) -> bool:
    """
    Write `new_contents` to `path` unless the file already holds exactly that text.

    The parent directory must already exist.

    Returns:
        True if the file was written
    """
    if Path(path).exists() and read_text_exact(path) == new_contents:
        logger.debug(f"Unchanged: {path}")
        return False

    write_text_exact(path, new_contents)
    logger.debug(f"Wrote: {path}")
    return True
