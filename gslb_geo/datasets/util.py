#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Utility functions for fetching the raw measurement files.

Files are first written with a ``.part`` suffix and renamed once complete,
so an interrupted transfer never leaves a truncated file in place.
"""

import gzip
import os
import shutil
from os import path
from typing import AnyStr

import requests

TIMEOUT = 30.0
CHUNK_SIZE = 1 << 20
PARTIAL_SUFFIX = ".part"


def _remove_partial(partial_path: AnyStr) -> None:
    if path.exists(partial_path):
        os.remove(partial_path)


def download_file(url: str, save_path: AnyStr) -> None:
    """
    Downloads a file and saves it on disk.

    Args:
        url: the URL to download the file from
        save_path: the path to save the file

    Returns: None
    Raises: RequestException if any error downloading the file occurs
    """
    partial_path = save_path + PARTIAL_SUFFIX
    try:
        with requests.get(url, timeout=TIMEOUT, stream=True) as response:
            response.raise_for_status()
            with open(partial_path, "wb") as file:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    file.write(chunk)
        os.replace(partial_path, save_path)
    except BaseException:
        _remove_partial(partial_path)
        raise


def decompress_gz(gz_file_path: AnyStr, output_dir: AnyStr) -> AnyStr:
    """
    Uncompress a gzipped file.

    Args:
        gz_file_path: the path to the gzipped file
        output_dir: the directory to decompress the gzipped file

    Returns:
        The path of the decompressed file.
    """
    basename, _ = path.splitext(path.basename(gz_file_path))
    output_path = path.join(output_dir, basename)
    partial_path = output_path + PARTIAL_SUFFIX

    try:
        with gzip.open(gz_file_path, "rb") as f_in:
            with open(partial_path, "wb") as f_out:
                shutil.copyfileobj(f_in, f_out)
        os.replace(partial_path, output_path)
    except BaseException:
        _remove_partial(partial_path)
        raise
    return output_path
