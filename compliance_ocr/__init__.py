"""Document Compliance OCR System.

Scans bills and cheques with Tesseract OCR after OpenCV image
normalization, extracts GSTIN, amount, and date fields with regex
matchers, and evaluates compliance rules against the results.
"""

__version__ = "1.0.0"
