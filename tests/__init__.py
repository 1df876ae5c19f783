"""
Test suite for the pdfquill package.
"""
