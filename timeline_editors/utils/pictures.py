#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Picture utilities for the Timeline Editors application.

This module converts picture files into data URLs that can be embedded in a
timeline item, and back into raw bytes for previews.
"""

import base64
import os
from typing import Tuple

from PIL import Image

from timeline_editors.models.item import Picture

DATA_URL_PREFIX = "data:"


def encode_picture(path: str) -> Picture:
    """Read an image file and embed it as a data URL.

    Args:
        path: Path to the image file

    Returns:
        Picture holding the data URL, titled after the file name

    Raises:
        OSError: If the file cannot be read or is not an image
    """
    with Image.open(path) as image:
        image_format = image.format
        image.verify()

    mime_type = Image.MIME.get(image_format, "application/octet-stream")

    with open(path, "rb") as f:
        image_data = base64.b64encode(f.read()).decode()

    return Picture(
        picture=f"{DATA_URL_PREFIX}{mime_type};base64,{image_data}",
        title=os.path.splitext(os.path.basename(path))[0],
    )


def decode_picture(data_url: str) -> Tuple[str, bytes]:
    """Split a base64 data URL into its MIME type and raw bytes.

    Args:
        data_url: URL of the form data:<mime>;base64,<data>

    Returns:
        Tuple of (mime_type, image_bytes)

    Raises:
        ValueError: If the URL is not a base64 data URL
    """
    if not data_url.startswith(DATA_URL_PREFIX) or ";base64," not in data_url:
        raise ValueError("Not a base64 data URL")
    header, encoded = data_url[len(DATA_URL_PREFIX):].split(";base64,", 1)
    return header, base64.b64decode(encoded)
