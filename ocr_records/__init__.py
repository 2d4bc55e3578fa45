"""
OCR Records - image upload, text extraction and record storage service.

Uploaded images are preprocessed, passed through an OCR engine and saved
as searchable records alongside the original image.
"""

__version__ = "1.0.0"
__author__ = "OCR Records Team"
