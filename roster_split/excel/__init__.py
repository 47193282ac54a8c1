"""Workbook reading, roster parsing and score sheet writing."""
