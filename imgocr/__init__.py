"""Image text extraction with Tesseract OCR.

A single-image OCR pipeline combining Pillow/OpenCV contrast
enhancement, a lifecycle-managed Tesseract engine with progress
reporting, and cleanup of common OCR character confusions.
"""
